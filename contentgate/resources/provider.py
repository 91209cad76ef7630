# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Resource attribute provider interface.

The provider is the external collaborator that owns resource records. The
gateway only needs their ownership, status and category attributes, plus a
way to mutate fields and enumerate records under a listing pre-filter.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..authz.types import ListingFilter
from ..core.types import ResourceAttributes, ResourceType


@dataclass
class ResourceRecord:
    """A stored resource as seen by the gateway."""
    resource_type: ResourceType
    resource_id: str
    attributes: ResourceAttributes = field(default_factory=ResourceAttributes)
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'type': self.resource_type.value,
            'id': self.resource_id,
            **self.attributes.to_dict(),
            **self.fields,
        }


class AttributeProvider(ABC):
    """
    Base class for resource attribute providers.
    """

    @abstractmethod
    async def lookup(self, resource_type: ResourceType, resource_id: str) -> ResourceAttributes:
        """
        Fetch the attributes of a resource.

        Raises:
            ResourceNotFoundError: if no such resource exists
        """
        pass

    @abstractmethod
    async def update(self, resource_type: ResourceType, resource_id: str,
                     fields: Mapping[str, Any]) -> ResourceRecord:
        """
        Mutate a resource's fields and return the updated record.

        Raises:
            ResourceNotFoundError: if no such resource exists
        """
        pass

    @abstractmethod
    async def list_resources(self, resource_type: ResourceType,
                             listing_filter: Optional[ListingFilter] = None) -> List[ResourceRecord]:
        """Enumerate resources of a type, applying the pre-filter when given."""
        pass

    async def close(self) -> None:
        """Release any resources held by the provider"""
        pass
