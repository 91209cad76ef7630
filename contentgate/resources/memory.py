# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
In-memory attribute provider for development and testing.
"""

import asyncio
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..authz.types import ListingFilter
from ..core.types import ResourceAttributes, ResourceType
from ..errors import ResourceNotFoundError
from .provider import AttributeProvider, ResourceRecord

ATTRIBUTE_KEYS = frozenset({'category', 'status', 'ownerId', 'owner_id', 'author'})


class MemoryAttributeProvider(AttributeProvider):
    """Dict-backed attribute provider"""

    def __init__(self, records: Optional[Iterable[ResourceRecord]] = None):
        self._records: Dict[Tuple[ResourceType, str], ResourceRecord] = {}
        self._lock = asyncio.Lock()
        for record in records or ():
            self._records[(record.resource_type, record.resource_id)] = record

    def put(self, resource_type: ResourceType, resource_id: str,
            category: Optional[str] = None, status: Optional[str] = None,
            owner_id: Optional[str] = None, **fields: Any) -> ResourceRecord:
        """Insert or replace a record."""
        record = ResourceRecord(
            resource_type=resource_type,
            resource_id=resource_id,
            attributes=ResourceAttributes(category=category, status=status, owner_id=owner_id),
            fields=dict(fields),
        )
        self._records[(resource_type, resource_id)] = record
        return record

    def _get(self, resource_type: ResourceType, resource_id: str) -> ResourceRecord:
        try:
            return self._records[(resource_type, resource_id)]
        except KeyError:
            raise ResourceNotFoundError(resource_type.value, resource_id) from None

    async def lookup(self, resource_type: ResourceType, resource_id: str) -> ResourceAttributes:
        async with self._lock:
            return self._get(resource_type, resource_id).attributes

    async def update(self, resource_type: ResourceType, resource_id: str,
                     fields: Mapping[str, Any]) -> ResourceRecord:
        async with self._lock:
            record = self._get(resource_type, resource_id)
            extra = {k: v for k, v in fields.items() if k not in ATTRIBUTE_KEYS}
            updated = replace(
                record,
                attributes=record.attributes.with_updates(fields),
                fields={**record.fields, **extra},
            )
            self._records[(resource_type, resource_id)] = updated
            return updated

    async def list_resources(self, resource_type: ResourceType,
                             listing_filter: Optional[ListingFilter] = None) -> List[ResourceRecord]:
        async with self._lock:
            return [
                record for (kind, _), record in self._records.items()
                if kind == resource_type
                and (listing_filter is None or listing_filter.matches(record.attributes))
            ]

    async def delete(self, resource_type: ResourceType, resource_id: str) -> bool:
        """Remove a record; returns whether it existed."""
        async with self._lock:
            return self._records.pop((resource_type, resource_id), None) is not None
