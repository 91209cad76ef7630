# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Error types, denial reasons and their externally visible codes.

Every denial carries exactly one ``DenialReason``. The catalog below is the
stable mapping from reason to transport status, error code and default
message; callers that need to distinguish a permanent authorization gap from
a recoverable one switch on the reason, never on the message text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class DenialReason(str, Enum):
    """Reasons a request can be denied."""
    INVALID_CREDENTIAL = "InvalidCredential"
    ROLE_DENIED = "RoleDenied"
    SUBSCRIPTION_REQUIRED = "SubscriptionRequired"
    DRAFT_NOT_VISIBLE = "DraftNotVisible"
    NOT_OWNER = "NotOwner"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    RATE_LIMIT_EXCEEDED = "RateLimitExceeded"
    ATTRIBUTE_PROVIDER_UNAVAILABLE = "AttributeProviderUnavailable"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DenialSpec:
    """Externally visible shape of a denial."""
    status: int
    error_code: str
    message: str
    retryable: bool = False


DENIAL_CATALOG: Dict[DenialReason, DenialSpec] = {
    DenialReason.INVALID_CREDENTIAL: DenialSpec(
        401, "invalid_credential", "Unauthorized"),
    DenialReason.ROLE_DENIED: DenialSpec(
        403, "role_denied", "Role does not permit this action"),
    DenialReason.SUBSCRIPTION_REQUIRED: DenialSpec(
        403, "subscription_required",
        "Premium subscription required to access premium content"),
    DenialReason.DRAFT_NOT_VISIBLE: DenialSpec(
        403, "draft_not_visible", "Cannot view draft articles of other users"),
    DenialReason.NOT_OWNER: DenialSpec(
        403, "not_owner", "Can only modify your own resources"),
    DenialReason.RESOURCE_NOT_FOUND: DenialSpec(
        404, "resource_not_found", "Resource not found"),
    DenialReason.RATE_LIMIT_EXCEEDED: DenialSpec(
        429, "rate_limit_exceeded", "Rate limit exceeded", retryable=True),
    DenialReason.ATTRIBUTE_PROVIDER_UNAVAILABLE: DenialSpec(
        503, "attribute_provider_unavailable",
        "Resource attributes are temporarily unavailable", retryable=True),
}

INTERNAL_ERROR_STATUS = 500
INTERNAL_ERROR_CODE = "internal_error"
INTERNAL_ERROR_MESSAGE = "Internal error"


def denial_spec(reason: DenialReason) -> DenialSpec:
    """Look up the catalog entry for a reason."""
    return DENIAL_CATALOG[reason]


class ContentGateError(Exception):
    """Base exception for all contentgate errors."""

    def __init__(
        self,
        message: str,
        error_code: str = INTERNAL_ERROR_CODE,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class ConfigurationError(ContentGateError):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, key: Optional[str] = None):
        details = {'key': key} if key else None
        super().__init__(message, "configuration_error", details)
        self.key = key


class DeniedError(ContentGateError):
    """Base for errors that end the pipeline with a denial rather than a fault."""

    reason: DenialReason = DenialReason.ROLE_DENIED

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        spec = denial_spec(self.reason)
        super().__init__(message or spec.message, spec.error_code, details, cause)

    @property
    def status(self) -> int:
        return denial_spec(self.reason).status


class InvalidCredentialError(DeniedError):
    """Missing, malformed, expired or unverifiable credential."""

    reason = DenialReason.INVALID_CREDENTIAL


class ResourceNotFoundError(DeniedError):
    """The attribute provider has no record for the requested resource."""

    reason = DenialReason.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} {resource_id} not found",
            details={'resource': str(resource_type), 'resource_id': resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class AttributeProviderUnavailableError(DeniedError):
    """The attribute provider failed or timed out; the pipeline fails closed."""

    reason = DenialReason.ATTRIBUTE_PROVIDER_UNAVAILABLE


class RateLimitExceededError(DeniedError):
    """The principal's tier quota for the current window is used up."""

    reason = DenialReason.RATE_LIMIT_EXCEEDED

    def __init__(self, tier: str, limit: int, retry_after: Optional[float] = None):
        super().__init__(
            f"Rate limit exceeded. {tier} tier allows {limit} requests/hour",
            details={'tier': str(tier), 'limit': limit},
        )
        self.tier = tier
        self.limit = limit
        self.retry_after = retry_after


class CounterStoreError(ContentGateError):
    """The rate counter store could not complete an operation."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message, "counter_store_error", cause=cause)


class UnauthorizedError(ContentGateError):
    """
    Raised by gateway adapters whose host signals 401 through an exception.

    The message is always generic; details stay in the logs.
    """

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "unauthorized")


__all__ = [
    'DenialReason',
    'DenialSpec',
    'DENIAL_CATALOG',
    'INTERNAL_ERROR_STATUS',
    'INTERNAL_ERROR_CODE',
    'INTERNAL_ERROR_MESSAGE',
    'denial_spec',
    'ContentGateError',
    'ConfigurationError',
    'DeniedError',
    'InvalidCredentialError',
    'ResourceNotFoundError',
    'AttributeProviderUnavailableError',
    'RateLimitExceededError',
    'CounterStoreError',
    'UnauthorizedError',
]
