# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Core types and data structures for the contentgate authorization pipeline.

Principals, resource descriptors and action requests are immutable for the
lifetime of a request; nothing in this module is ever persisted.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class Role(str, Enum):
    """Principal roles, lowest privilege first."""
    VIEWER = "viewer"
    AUTHOR = "author"
    EDITOR = "editor"
    ADMIN = "admin"

    def __str__(self) -> str:
        return self.value


class SubscriptionTier(str, Enum):
    """Subscription tiers carried in the credential."""
    FREE = "free"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"

    def __str__(self) -> str:
        return self.value


class ResourceType(str, Enum):
    """Resource types exposed by the publishing API."""
    ARTICLE = "Article"
    CATEGORY = "Category"
    COMMENT = "Comment"
    MEDIA = "Media"

    def __str__(self) -> str:
        return self.value


class Action(str, Enum):
    """Actions a principal may request on a resource."""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    PUBLISH = "publish"

    def __str__(self) -> str:
        return self.value


# Roles that bypass subscription, draft-visibility and ownership checks
PRIVILEGED_ROLES = frozenset({Role.EDITOR, Role.ADMIN})

# Tiers entitled to premium content
PREMIUM_TIERS = frozenset({SubscriptionTier.PREMIUM, SubscriptionTier.ENTERPRISE})

# Actions narrowed by the ownership relationship
OWNERSHIP_ACTIONS = frozenset({Action.UPDATE, Action.DELETE, Action.PUBLISH})

PREMIUM_CATEGORY = "premium"
DRAFT_STATUS = "draft"
PUBLISHED_STATUS = "published"


@dataclass(frozen=True)
class Principal:
    """
    Authenticated caller, built only from a verified credential.
    """
    id: str
    email: str
    role: Role
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    @property
    def has_premium_access(self) -> bool:
        return self.subscription_tier in PREMIUM_TIERS or self.is_privileged

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role.value,
            'subscription_tier': self.subscription_tier.value,
        }


@dataclass(frozen=True)
class ResourceAttributes:
    """Ownership, status and category attributes of a stored resource."""
    category: Optional[str] = None
    status: Optional[str] = None
    owner_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'category': self.category,
            'status': self.status,
            'ownerId': self.owner_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ResourceAttributes':
        """Create from a record mapping; accepts ``ownerId``, ``owner_id`` or ``author``."""
        owner = data.get('ownerId', data.get('owner_id', data.get('author')))
        return cls(
            category=data.get('category'),
            status=data.get('status'),
            owner_id=str(owner) if owner is not None else None,
        )

    def with_updates(self, fields: Mapping[str, Any]) -> 'ResourceAttributes':
        """Return a copy with any attribute keys in ``fields`` applied."""
        changes: Dict[str, Any] = {}
        if 'category' in fields:
            changes['category'] = fields['category']
        if 'status' in fields:
            changes['status'] = fields['status']
        for key in ('ownerId', 'owner_id', 'author'):
            if key in fields:
                value = fields[key]
                changes['owner_id'] = str(value) if value is not None else None
        return replace(self, **changes)


@dataclass(frozen=True)
class ResourceDescriptor:
    """Target of an action; ``id`` is absent for listings and creates."""
    type: ResourceType
    id: Optional[str] = None
    attributes: ResourceAttributes = field(default_factory=ResourceAttributes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'type': self.type.value,
            'id': self.id,
            'attributes': self.attributes.to_dict(),
        }


@dataclass(frozen=True)
class ActionRequest:
    """The unit of decision: one per inbound call."""
    principal: Principal
    resource: ResourceDescriptor
    action: Action

    @property
    def is_listing(self) -> bool:
        return self.action == Action.READ and self.resource.id is None


@dataclass
class InboundRequest:
    """
    Request data handed over by the host web shell.

    ``authorization_token`` is the out-of-band token field some API gateways
    supply instead of (or in addition to) the ``Authorization`` header.
    ``method_arn`` is the gateway's method ARN, which carries the HTTP verb.
    """
    method: str = "GET"
    path: str = "/"
    headers: Dict[str, str] = field(default_factory=dict)
    authorization_token: Optional[str] = None
    method_arn: Optional[str] = None
    request_id: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None
