# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Core types and configuration for contentgate.
"""

from .types import (
    Role,
    SubscriptionTier,
    ResourceType,
    Action,
    PRIVILEGED_ROLES,
    PREMIUM_TIERS,
    OWNERSHIP_ACTIONS,
    Principal,
    ResourceAttributes,
    ResourceDescriptor,
    ActionRequest,
    InboundRequest,
)

from .config import (
    TokenConfig,
    RateLimitConfig,
    GatewayConfig,
)

__all__ = [
    'Role',
    'SubscriptionTier',
    'ResourceType',
    'Action',
    'PRIVILEGED_ROLES',
    'PREMIUM_TIERS',
    'OWNERSHIP_ACTIONS',
    'Principal',
    'ResourceAttributes',
    'ResourceDescriptor',
    'ActionRequest',
    'InboundRequest',
    'TokenConfig',
    'RateLimitConfig',
    'GatewayConfig',
]
