"""
Tests for layered policy evaluation.
"""

import pytest

from contentgate.authz import CapabilityTable, ListingFilter, PolicyEvaluator
from contentgate.core.types import (
    Action,
    ActionRequest,
    ResourceAttributes,
    ResourceDescriptor,
    ResourceType,
    Role,
)
from contentgate.errors import DenialReason

PREMIUM_PUBLISHED = ResourceAttributes(category="premium", status="published", owner_id="author-1")
FREE_DRAFT = ResourceAttributes(category="free", status="draft", owner_id="author-1")
FREE_PUBLISHED = ResourceAttributes(category="free", status="published", owner_id="author-1")


def make_request(principal, action, resource_type=ResourceType.ARTICLE,
                 resource_id="a1", attributes=None):
    return ActionRequest(
        principal=principal,
        resource=ResourceDescriptor(resource_type, resource_id, attributes or ResourceAttributes()),
        action=action,
    )


@pytest.fixture
def evaluator():
    return PolicyEvaluator()


class TestRoleLayer:
    """Test the capability table."""

    @pytest.mark.parametrize("resource_type", list(ResourceType))
    def test_viewer_cannot_create(self, evaluator, free_viewer, resource_type):
        verdict = evaluator.evaluate(make_request(free_viewer, Action.CREATE, resource_type, None))
        assert not verdict.allowed
        assert verdict.reason == DenialReason.ROLE_DENIED

    def test_author_cannot_publish_own_draft(self, evaluator, author):
        verdict = evaluator.evaluate(make_request(author, Action.PUBLISH, attributes=FREE_DRAFT))
        assert verdict.reason == DenialReason.ROLE_DENIED

    def test_author_reads_categories_only(self, evaluator, author):
        request = make_request(author, Action.CREATE, ResourceType.CATEGORY, None)
        assert evaluator.evaluate(request).reason == DenialReason.ROLE_DENIED
        listing = make_request(author, Action.READ, ResourceType.CATEGORY, None)
        assert evaluator.evaluate(listing).allowed

    def test_denial_message_names_role_and_action(self, evaluator, free_viewer):
        verdict = evaluator.evaluate(make_request(free_viewer, Action.DELETE))
        assert "viewer" in verdict.message
        assert "delete" in verdict.message

    def test_custom_table(self, free_viewer):
        table = CapabilityTable.from_dict({'viewer': {'*': ["read"], 'Comment': ["read", "create"]}})
        evaluator = PolicyEvaluator(table)
        request = make_request(free_viewer, Action.CREATE, ResourceType.COMMENT, None)
        assert evaluator.evaluate(request).allowed
        assert not evaluator.evaluate(make_request(free_viewer, Action.CREATE, resource_id=None)).allowed

    def test_table_round_trip(self):
        table = CapabilityTable()
        rebuilt = CapabilityTable.from_dict(table.to_dict())
        for role in Role:
            for resource_type in ResourceType:
                assert rebuilt.allowed_actions(role, resource_type) == \
                    table.allowed_actions(role, resource_type)


class TestAttributeLayer:
    """Test premium and draft rules for reads."""

    def test_free_viewer_premium_article(self, evaluator, free_viewer):
        verdict = evaluator.evaluate(make_request(free_viewer, Action.READ, attributes=PREMIUM_PUBLISHED))
        assert verdict.reason == DenialReason.SUBSCRIPTION_REQUIRED

    def test_premium_viewer_premium_article(self, evaluator, premium_viewer):
        verdict = evaluator.evaluate(make_request(premium_viewer, Action.READ, attributes=PREMIUM_PUBLISHED))
        assert verdict.allowed

    def test_editor_on_free_tier_reads_premium(self, evaluator, editor):
        verdict = evaluator.evaluate(make_request(editor, Action.READ, attributes=PREMIUM_PUBLISHED))
        assert verdict.allowed

    def test_draft_hidden_from_others(self, evaluator, free_viewer, other_author):
        for principal in (free_viewer, other_author):
            verdict = evaluator.evaluate(make_request(principal, Action.READ, attributes=FREE_DRAFT))
            assert verdict.reason == DenialReason.DRAFT_NOT_VISIBLE

    def test_draft_visible_to_owner_and_editor(self, evaluator, author, editor):
        for principal in (author, editor):
            verdict = evaluator.evaluate(make_request(principal, Action.READ, attributes=FREE_DRAFT))
            assert verdict.allowed

    def test_premium_draft_of_another_user_is_draft_denial(self, evaluator, free_viewer):
        attributes = ResourceAttributes(category="premium", status="draft", owner_id="author-1")
        verdict = evaluator.evaluate(make_request(free_viewer, Action.READ, attributes=attributes))
        assert verdict.reason == DenialReason.DRAFT_NOT_VISIBLE

    def test_premium_check_applies_to_reads_only(self, evaluator, author):
        # An author on the free tier may still edit their own premium article
        verdict = evaluator.evaluate(make_request(author, Action.UPDATE, attributes=PREMIUM_PUBLISHED))
        assert verdict.allowed


class TestOwnershipLayer:
    """Test the ownership rule for update, delete and publish."""

    @pytest.mark.parametrize("action", [Action.UPDATE, Action.DELETE])
    def test_non_owner_author(self, evaluator, other_author, action):
        verdict = evaluator.evaluate(make_request(other_author, action, attributes=FREE_PUBLISHED))
        assert verdict.reason == DenialReason.NOT_OWNER

    def test_non_owner_author_on_premium_draft_is_not_owner(self, evaluator, other_author):
        attributes = ResourceAttributes(category="premium", status="draft", owner_id="author-1")
        verdict = evaluator.evaluate(make_request(other_author, Action.DELETE, attributes=attributes))
        assert verdict.reason == DenialReason.NOT_OWNER

    def test_owner_may_update(self, evaluator, author):
        verdict = evaluator.evaluate(make_request(author, Action.UPDATE, attributes=FREE_DRAFT))
        assert verdict.allowed

    def test_editor_publishes_others_draft(self, evaluator, editor):
        verdict = evaluator.evaluate(make_request(editor, Action.PUBLISH, attributes=FREE_DRAFT))
        assert verdict.allowed
        assert verdict.context['action'] == Action.PUBLISH
        assert verdict.context['resourceId'] == "a1"

    def test_verdict_context_is_read_only(self, evaluator, editor):
        verdict = evaluator.evaluate(make_request(editor, Action.PUBLISH, attributes=FREE_DRAFT))
        with pytest.raises(TypeError):
            verdict.context['role'] = "admin"
        assert verdict.context['role'] == editor.role


class TestListings:
    """Test enumeration pre-filters."""

    def test_viewer_listing_is_filtered(self, evaluator, free_viewer):
        verdict = evaluator.evaluate(make_request(free_viewer, Action.READ, resource_id=None))
        assert verdict.allowed
        assert verdict.listing_filter == ListingFilter(owner_id="viewer-1")
        assert verdict.context['listing_scope'] == "published_or_owned"

    def test_editor_listing_is_unfiltered(self, evaluator, editor):
        verdict = evaluator.evaluate(make_request(editor, Action.READ, resource_id=None))
        assert verdict.allowed
        assert verdict.listing_filter is None

    def test_filter_matches(self):
        listing_filter = ListingFilter(owner_id="author-1")
        assert listing_filter.matches(FREE_DRAFT)
        assert listing_filter.matches(ResourceAttributes(status="published", owner_id="x"))
        assert not listing_filter.matches(ResourceAttributes(status="draft", owner_id="x"))
