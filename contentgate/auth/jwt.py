# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
JWT verification and issuance for contentgate bearer credentials.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ..core.config import TokenConfig
from ..core.types import Principal
from ..errors import InvalidCredentialError

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Verifies signature and expiry of bearer tokens with a shared secret."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Raises:
            InvalidCredentialError: on any verification failure
        """
        options = {
            'require': ['exp'] if self.config.require_expiry else [],
            'verify_aud': self.config.audience is not None,
        }

        try:
            return jwt.decode(
                token,
                self.config.secret_key,
                algorithms=self.config.algorithms,
                audience=self.config.audience,
                issuer=self.config.issuer,
                leeway=self.config.leeway,
                options=options,
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Rejected expired token")
            raise InvalidCredentialError(details={'cause': 'expired'}, cause=e) from e
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected invalid token: {e}")
            raise InvalidCredentialError(details={'cause': 'invalid'}, cause=e) from e


class TokenIssuer:
    """Mints tokens carrying the principal claims the verifier expects."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue(self, principal: Principal,
              expires_in: timedelta = timedelta(hours=1),
              now: Optional[datetime] = None,
              **extra_claims: Any) -> str:
        now = now or datetime.now(timezone.utc)
        claims: Dict[str, Any] = {
            'userId': principal.id,
            'email': principal.email,
            'role': principal.role.value,
            'subscription_tier': principal.subscription_tier.value,
            'iat': int(now.timestamp()),
            'exp': int((now + expires_in).timestamp()),
        }
        if self.config.issuer:
            claims['iss'] = self.config.issuer
        if self.config.audience:
            claims['aud'] = self.config.audience
        claims.update(extra_claims)

        token = jwt.encode(claims, self.config.secret_key, algorithm=self.config.algorithms[0])
        if isinstance(token, bytes):
            token = token.decode('utf-8')
        return token
