# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Decision packaging: turn verdicts into what crosses the wire.

On allow, the downstream handler receives a flat mapping of strings it can
trust as request metadata (API gateways only propagate string values). On
deny, the caller receives a stable error code, a message naming the reason
and the transport status.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from ..authz.types import Verdict
from ..errors import DenialReason, denial_spec

CONTEXT_KEYS = (
    'userId',
    'email',
    'role',
    'subscription_tier',
    'resource',
    'action',
    'resourceId',
)

POLICY_VERSION = "2012-10-17"
INVOKE_ACTION = "execute-api:Invoke"


def to_text(value: Any) -> str:
    """Coerce a context value to text; None becomes the empty string."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def stringify_context(context: Mapping[str, Any]) -> Dict[str, str]:
    return {key: to_text(value) for key, value in context.items()}


@dataclass(frozen=True)
class AuthorizationContext(Mapping[str, str]):
    """Trusted, string-valued request context forwarded on allow."""
    values: Dict[str, str] = field(default_factory=dict)

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def to_dict(self) -> Dict[str, str]:
        return dict(self.values)

    def to_payload(self) -> Dict[str, Any]:
        return {'allowed': True, 'context': self.to_dict()}


@dataclass(frozen=True)
class DenialResponse:
    """Externally visible denial."""
    reason: DenialReason
    status: int
    error_code: str
    message: str
    headers: Dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            'allowed': False,
            'reason': self.reason.value,
            'error': self.error_code,
            'message': self.message,
        }


class DecisionPackager:
    """Builds forwardable contexts and denial responses."""

    def package(self, verdict: Verdict) -> Union[AuthorizationContext, DenialResponse]:
        if verdict.allowed:
            return self.allow(verdict)
        return self.deny(verdict.reason, verdict.message)

    def allow(self, verdict: Verdict) -> AuthorizationContext:
        values = {key: to_text(verdict.context.get(key)) for key in CONTEXT_KEYS}
        for key, value in verdict.context.items():
            if key not in values:
                values[key] = to_text(value)
        return AuthorizationContext(values)

    def deny(self, reason: DenialReason, message: Optional[str] = None,
             retry_after: Optional[float] = None) -> DenialResponse:
        spec = denial_spec(reason)
        # 401 never explains itself beyond the generic message
        if reason == DenialReason.INVALID_CREDENTIAL or not message:
            message = spec.message

        headers = {}
        if retry_after is not None:
            headers['Retry-After'] = str(max(0, int(retry_after)))

        return DenialResponse(
            reason=reason,
            status=spec.status,
            error_code=spec.error_code,
            message=message,
            headers=headers,
        )


def build_policy_document(principal_id: str, effect: str, method_arn: str,
                          context: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Render an API gateway authorizer response.

    Context values are all strings.
    """
    return {
        'principalId': principal_id,
        'policyDocument': {
            'Version': POLICY_VERSION,
            'Statement': [
                {
                    'Action': INVOKE_ACTION,
                    'Effect': effect,
                    'Resource': method_arn,
                }
            ],
        },
        'context': stringify_context(context or {}),
    }
