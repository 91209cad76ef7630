# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package gateway runs the authorization pipeline and adapts it to hosts.
"""

from .packager import (
    AuthorizationContext,
    DenialResponse,
    DecisionPackager,
    build_policy_document,
    stringify_context,
)

from .pipeline import (
    AuthorizationGateway,
    GatewayResult,
    Allowed,
    Denied,
    Fault,
)

from .events import (
    handle_authorizer_event,
    request_from_event,
)

__all__ = [
    'AuthorizationContext',
    'DenialResponse',
    'DecisionPackager',
    'build_policy_document',
    'stringify_context',
    'AuthorizationGateway',
    'GatewayResult',
    'Allowed',
    'Denied',
    'Fault',
    'handle_authorizer_event',
    'request_from_event',
]
