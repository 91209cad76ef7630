# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Identity extraction: locate the bearer credential on an inbound request,
verify it and turn its claims into a ``Principal``.

A token may arrive in the gateway's out-of-band token field or in the
``Authorization`` header (any case), with or without the ``Bearer`` prefix.
Anything short of a fully verified token with a known role yields
``InvalidCredentialError``; there is no partially trusted principal.
"""

import logging
from typing import Any, Mapping, Optional

from ..core.types import InboundRequest, Principal, Role, SubscriptionTier
from ..errors import InvalidCredentialError
from .jwt import TokenVerifier

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_SCHEME = "bearer"


def strip_bearer(raw: Optional[str]) -> Optional[str]:
    """Remove a leading ``Bearer`` prefix, if any."""
    if raw is None:
        return None
    value = raw.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        value = rest.strip()
    return value or None


def extract_token(request: InboundRequest) -> Optional[str]:
    """Return the raw token from the first location that carries one."""
    token = strip_bearer(request.authorization_token)
    if token:
        return token
    return strip_bearer(request.header(AUTHORIZATION_HEADER))


def principal_from_claims(claims: Mapping[str, Any]) -> Principal:
    """Build a principal from verified claims."""
    user_id = claims.get('userId') or claims.get('sub')
    if not user_id:
        raise InvalidCredentialError(details={'cause': 'missing_user_id'})

    try:
        role = Role(claims.get('role'))
    except ValueError as e:
        raise InvalidCredentialError(details={'cause': 'unknown_role'}, cause=e) from e

    raw_tier = claims.get('subscription_tier') or SubscriptionTier.FREE.value
    try:
        tier = SubscriptionTier(raw_tier)
    except ValueError as e:
        raise InvalidCredentialError(details={'cause': 'unknown_tier'}, cause=e) from e

    return Principal(
        id=str(user_id),
        email=str(claims.get('email') or ''),
        role=role,
        subscription_tier=tier,
    )


class IdentityExtractor:
    """Turns an inbound request's credential into a verified principal."""

    def __init__(self, verifier: TokenVerifier):
        self.verifier = verifier

    def extract(self, request: InboundRequest) -> Principal:
        token = extract_token(request)
        if not token:
            logger.info("No token provided")
            raise InvalidCredentialError(details={'cause': 'missing'})

        claims = self.verifier.decode(token)
        principal = principal_from_claims(claims)
        logger.debug(f"Authenticated {principal.id} ({principal.role}, {principal.subscription_tier})")
        return principal
