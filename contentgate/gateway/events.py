# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
API gateway custom authorizer adapter.

The gateway calls the authorizer with an event carrying the token (either
``authorizationToken`` or an ``Authorization`` header), the method ARN and,
for request authorizers, the HTTP method and path. It expects an IAM policy
back, or an ``Unauthorized`` error for a 401.

The authorizer contract only has Allow, Deny and Unauthorized. Every
policy denial, including ``RateLimitExceeded`` and ``ResourceNotFound``,
therefore reaches the client as the gateway's 403; the reason, error code
and message travel in the policy context. Deployments that need 429 or 404
on the wire should run the FastAPI middleware in the service instead.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ..authz import method_from_arn, path_from_arn
from ..core.types import InboundRequest
from ..errors import DenialReason, UnauthorizedError
from .packager import build_policy_document
from .pipeline import Allowed, AuthorizationGateway, Denied

logger = logging.getLogger(__name__)

ANONYMOUS_PRINCIPAL = "anonymous"


def request_from_event(event: Mapping[str, Any]) -> InboundRequest:
    """Build an inbound request from an authorizer event."""
    method_arn = event.get('methodArn')
    headers = event.get('headers') or {}
    request_context = event.get('requestContext') or {}

    method = (event.get('httpMethod')
              or request_context.get('httpMethod')
              or method_from_arn(method_arn)
              or "GET")
    path = event.get('path') or path_from_arn(method_arn) or "/"

    return InboundRequest(
        method=method,
        path=path,
        headers=dict(headers),
        authorization_token=event.get('authorizationToken'),
        method_arn=method_arn,
        request_id=request_context.get('requestId'),
    )


async def handle_authorizer_event(gateway: AuthorizationGateway,
                                  event: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Authorize an API gateway event.

    Returns:
        An Allow policy with the forwarded context, or a Deny policy for
        authorization denials

    Raises:
        UnauthorizedError: for invalid credentials and internal faults
    """
    request = request_from_event(event)
    method_arn: Optional[str] = event.get('methodArn') or "*"

    result = await gateway.authorize(request)

    if isinstance(result, Allowed):
        return build_policy_document(
            result.principal.id, "Allow", method_arn, result.context.to_dict())

    if isinstance(result, Denied):
        if result.reason == DenialReason.INVALID_CREDENTIAL:
            raise UnauthorizedError()
        principal_id = result.principal.id if result.principal else ANONYMOUS_PRINCIPAL
        return build_policy_document(principal_id, "Deny", method_arn, {
            'reason': result.reason,
            'error': result.response.error_code,
            'message': result.message,
        })

    logger.error(f"Authorizer fault for {request.method} {request.path}")
    raise UnauthorizedError()
