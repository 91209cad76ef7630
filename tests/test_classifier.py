"""
Tests for request classification.
"""

import pytest

from contentgate.authz import (
    RequestClassifier,
    method_from_arn,
    path_from_arn,
    split_path,
)
from contentgate.core.types import Action, ResourceType

ARN = "arn:aws:execute-api:us-east-1:123456789012:abcdef123/prod/POST/articles/a1/publish"


class TestClassifier:
    """Test (method, path) -> (resource type, action, id)."""

    def setup_method(self):
        self.classifier = RequestClassifier()

    def test_read_by_id(self):
        result = self.classifier.classify("GET", "/articles/abc123")
        assert result.as_tuple() == (ResourceType.ARTICLE, Action.READ, "abc123")

    def test_classification_is_stable(self):
        first = self.classifier.classify("GET", "/articles/abc123")
        second = self.classifier.classify("GET", "/articles/abc123")
        assert first == second

    @pytest.mark.parametrize("method,action", [
        ("GET", Action.READ),
        ("POST", Action.CREATE),
        ("PUT", Action.UPDATE),
        ("PATCH", Action.READ),
        ("DELETE", Action.DELETE),
    ])
    def test_method_mapping(self, method, action):
        assert self.classifier.classify(method, "/comments/c1").action == action

    def test_lowercase_method(self):
        assert self.classifier.classify("delete", "/media/m1").action == Action.DELETE

    def test_publish(self):
        result = self.classifier.classify("POST", "/articles/a1/publish")
        assert result.as_tuple() == (ResourceType.ARTICLE, Action.PUBLISH, "a1")

    def test_create_has_no_id(self):
        result = self.classifier.classify("POST", "/articles")
        assert result.as_tuple() == (ResourceType.ARTICLE, Action.CREATE, None)

    def test_listing(self):
        result = self.classifier.classify("GET", "/categories")
        assert result.as_tuple() == (ResourceType.CATEGORY, Action.READ, None)

    def test_segments_match_whole_words(self):
        # "media" must not match inside "multimedia"
        result = self.classifier.classify("GET", "/multimedia/x1")
        assert result.resource_type == ResourceType.ARTICLE
        assert result.resource_id is None

    def test_first_table_entry_wins(self):
        result = self.classifier.classify("GET", "/articles/a1/comments")
        assert result.resource_type == ResourceType.ARTICLE
        assert result.resource_id == "a1"

    def test_nested_path_under_api_prefix(self):
        result = self.classifier.classify("GET", "/api/v1/media/m7?size=large")
        assert result.as_tuple() == (ResourceType.MEDIA, Action.READ, "m7")

    def test_unmatched_path_defaults_to_article(self, caplog):
        with caplog.at_level("WARNING"):
            result = self.classifier.classify("GET", "/health")
        assert result.resource_type == ResourceType.ARTICLE
        assert "No route matches" in caplog.text

    def test_unknown_method_is_read(self, caplog):
        with caplog.at_level("WARNING"):
            result = self.classifier.classify("OPTIONS", "/articles/a1")
        assert result.action == Action.READ
        assert "Unmapped HTTP method" in caplog.text

    def test_custom_routes(self):
        classifier = RequestClassifier(routes=[("posts", ResourceType.ARTICLE),
                                               ("uploads", ResourceType.MEDIA)])
        assert classifier.classify("GET", "/uploads/u1").resource_type == ResourceType.MEDIA
        assert classifier.classify("GET", "/posts/p1").resource_id == "p1"


class TestPathHelpers:
    """Test path and method ARN helpers."""

    def test_split_path(self):
        assert split_path("/articles//a1/?x=1") == ("articles", "a1")
        assert split_path("") == ()

    def test_method_from_arn(self):
        assert method_from_arn(ARN) == "POST"
        assert method_from_arn(None) is None
        assert method_from_arn("arn:aws:execute-api:us-east-1:1:api") is None

    def test_path_from_arn(self):
        assert path_from_arn(ARN) == "/articles/a1/publish"
        assert path_from_arn("arn:aws:execute-api:us-east-1:1:api/prod/GET") is None
