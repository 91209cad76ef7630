# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Layered policy evaluation.

Layers run in a fixed order and can only deny:

1. role layer: the capability table must grant the action on the type;
2. attribute layer (reads only): drafts are visible only to their owner or
   a privileged role, and premium content needs a premium tier or a
   privileged role;
3. ownership layer (update/delete/publish): the principal must own the
   resource or hold a privileged role.

The first denying layer decides the reason. Listings (reads without a
resource id) skip layers 2 and 3 and return a pre-filter instead.
"""

import logging
from typing import Callable, Optional, Sequence

from ..core.types import (
    DRAFT_STATUS,
    OWNERSHIP_ACTIONS,
    PREMIUM_CATEGORY,
    Action,
    ActionRequest,
)
from ..errors import DenialReason
from .policy import CapabilityTable
from .types import ListingFilter, Verdict

logger = logging.getLogger(__name__)

Layer = Callable[[ActionRequest], Optional[Verdict]]


class PolicyEvaluator:
    """Evaluates an action request through the role, attribute and ownership layers."""

    def __init__(self, capabilities: Optional[CapabilityTable] = None):
        self.capabilities = capabilities or CapabilityTable()

    @property
    def layers(self) -> Sequence[Layer]:
        return (self.check_role, self.check_attributes, self.check_ownership)

    def evaluate(self, request: ActionRequest) -> Verdict:
        denial = self.check_role(request)
        if denial is not None:
            return denial

        if request.is_listing:
            return self._listing_verdict(request)

        for layer in self.layers[1:]:
            denial = layer(request)
            if denial is not None:
                return denial

        return Verdict.allow(request)

    def check_role(self, request: ActionRequest) -> Optional[Verdict]:
        principal = request.principal
        resource_type = request.resource.type
        if self.capabilities.permits(principal.role, resource_type, request.action):
            return None
        return Verdict.deny(
            DenialReason.ROLE_DENIED,
            f"Role '{principal.role}' may not {request.action} {resource_type}",
        )

    def check_attributes(self, request: ActionRequest) -> Optional[Verdict]:
        if request.action != Action.READ:
            return None

        principal = request.principal
        attributes = request.resource.attributes

        if (attributes.status == DRAFT_STATUS
                and attributes.owner_id != principal.id
                and not principal.is_privileged):
            return Verdict.deny(
                DenialReason.DRAFT_NOT_VISIBLE,
                "Cannot view draft articles of other users",
            )

        if attributes.category == PREMIUM_CATEGORY and not principal.has_premium_access:
            return Verdict.deny(
                DenialReason.SUBSCRIPTION_REQUIRED,
                "Premium subscription required to access premium content",
            )

        return None

    def check_ownership(self, request: ActionRequest) -> Optional[Verdict]:
        if request.action not in OWNERSHIP_ACTIONS:
            return None

        owner_id = request.resource.attributes.owner_id
        principal = request.principal
        if owner_id is None or owner_id == principal.id or principal.is_privileged:
            return None

        return Verdict.deny(
            DenialReason.NOT_OWNER,
            f"Can only {request.action} your own {request.resource.type} resources",
        )

    def _listing_verdict(self, request: ActionRequest) -> Verdict:
        principal = request.principal
        if principal.is_privileged:
            return Verdict.allow(request)
        return Verdict.allow(request, ListingFilter(owner_id=principal.id))
