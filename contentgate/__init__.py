"""
contentgate Python Package

Request authorization for content APIs: identity extraction, role and
attribute policy, per-tier rate limiting and decision packaging.
"""

__version__ = "0.1.0"
__author__ = "contentgate developers"

from .core.config import GatewayConfig
from .core.types import (
    Role,
    SubscriptionTier,
    ResourceType,
    Action,
    Principal,
    InboundRequest,
)
from .errors import DenialReason
from .gateway import (
    AuthorizationGateway,
    Allowed,
    Denied,
    Fault,
    handle_authorizer_event,
)

__all__ = [
    "GatewayConfig",
    "Role",
    "SubscriptionTier",
    "ResourceType",
    "Action",
    "Principal",
    "InboundRequest",
    "DenialReason",
    "AuthorizationGateway",
    "Allowed",
    "Denied",
    "Fault",
    "handle_authorizer_event",
]
