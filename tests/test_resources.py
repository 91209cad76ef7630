"""
Tests for the in-memory attribute provider.
"""

import pytest

from contentgate.authz import ListingFilter
from contentgate.core.types import ResourceAttributes, ResourceType
from contentgate.errors import ResourceNotFoundError


class TestMemoryAttributeProvider:
    """Test lookups, updates and filtered listings."""

    @pytest.mark.asyncio
    async def test_lookup(self, provider):
        attributes = await provider.lookup(ResourceType.ARTICLE, "premium-pub")
        assert attributes == ResourceAttributes(category="premium", status="published", owner_id="author-1")

    @pytest.mark.asyncio
    async def test_lookup_missing(self, provider):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await provider.lookup(ResourceType.MEDIA, "free-pub")
        assert exc_info.value.status == 404
        assert exc_info.value.resource_id == "free-pub"

    @pytest.mark.asyncio
    async def test_update_splits_attributes_and_fields(self, provider):
        record = await provider.update(ResourceType.ARTICLE, "draft-1",
                                       {'status': "published", 'title': "Done"})

        assert record.attributes.status == "published"
        assert record.attributes.owner_id == "author-1"
        assert record.fields == {'title': "Done"}
        assert (await provider.lookup(ResourceType.ARTICLE, "draft-1")).status == "published"

    @pytest.mark.asyncio
    async def test_update_owner_from_author_key(self, provider):
        record = await provider.update(ResourceType.ARTICLE, "free-pub", {'author': "author-9"})
        assert record.attributes.owner_id == "author-9"
        assert record.to_dict()['ownerId'] == "author-9"

    @pytest.mark.asyncio
    async def test_update_missing(self, provider):
        with pytest.raises(ResourceNotFoundError):
            await provider.update(ResourceType.ARTICLE, "ghost", {'status': "draft"})

    @pytest.mark.asyncio
    async def test_listing_filter(self, provider):
        provider.put(ResourceType.ARTICLE, "others-draft", status="draft", owner_id="author-2")

        everything = await provider.list_resources(ResourceType.ARTICLE)
        visible = await provider.list_resources(ResourceType.ARTICLE, ListingFilter(owner_id="author-2"))

        assert len(everything) == 5
        assert sorted(r.resource_id for r in visible) == ["free-pub", "other-pub", "others-draft", "premium-pub"]

    @pytest.mark.asyncio
    async def test_delete(self, provider):
        assert await provider.delete(ResourceType.COMMENT, "comment-1")
        assert not await provider.delete(ResourceType.COMMENT, "comment-1")


class TestResourceAttributes:
    """Test attribute mapping."""

    def test_from_dict_aliases(self):
        assert ResourceAttributes.from_dict({'author': 7}).owner_id == "7"
        assert ResourceAttributes.from_dict({'ownerId': "a", 'owner_id': "b"}).owner_id == "a"
        assert ResourceAttributes.from_dict({}).owner_id is None
