# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Authorization decision types: verdicts and listing pre-filters.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..core.types import PUBLISHED_STATUS, ActionRequest, ResourceAttributes
from ..errors import DenialReason


@dataclass(frozen=True)
class ListingFilter:
    """
    Pre-filter for enumerations by non-privileged principals: only published
    resources or resources the principal owns.
    """
    owner_id: str

    scope = "published_or_owned"

    def matches(self, attributes: ResourceAttributes) -> bool:
        return attributes.status == PUBLISHED_STATUS or attributes.owner_id == self.owner_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'scope': self.scope,
            'status': PUBLISHED_STATUS,
            'ownerId': self.owner_id,
        }


@dataclass(frozen=True)
class Verdict:
    """
    Outcome of policy evaluation for one action request.

    ``reason`` is set exactly when ``allowed`` is false. ``context`` carries
    the resolved principal/resource snapshot forwarded downstream on allow.
    """
    allowed: bool
    reason: Optional[DenialReason] = None
    message: str = ""
    context: Mapping[str, Any] = field(default_factory=dict)
    listing_filter: Optional[ListingFilter] = None

    def __post_init__(self):
        object.__setattr__(self, 'context', MappingProxyType(dict(self.context)))

    @classmethod
    def allow(cls, request: ActionRequest,
              listing_filter: Optional[ListingFilter] = None) -> 'Verdict':
        principal = request.principal
        context = {
            'userId': principal.id,
            'email': principal.email,
            'role': principal.role,
            'subscription_tier': principal.subscription_tier,
            'resource': request.resource.type,
            'action': request.action,
            'resourceId': request.resource.id,
        }
        if listing_filter is not None:
            context['listing_scope'] = listing_filter.scope
        return cls(allowed=True, context=context, listing_filter=listing_filter)

    @classmethod
    def deny(cls, reason: DenialReason, message: str) -> 'Verdict':
        return cls(allowed=False, reason=reason, message=message)
