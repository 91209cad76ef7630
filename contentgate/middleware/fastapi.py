# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
FastAPI middleware running the authorization gateway in front of every route.
"""

import logging
from typing import Callable, Iterable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.types import InboundRequest
from ..gateway import Allowed, AuthorizationGateway

logger = logging.getLogger(__name__)


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """
    Authorize requests before they reach the application.

    On allow, the forwarded context is stored on
    ``request.state.authorization`` and the listing pre-filter, if any, on
    ``request.state.listing_filter``. Otherwise a JSON denial is returned
    with the mapped status.
    """

    def __init__(self, app, gateway: AuthorizationGateway,
                 skip_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.gateway = gateway
        self.skip_paths = frozenset(skip_paths or ())

    def _to_inbound(self, request: Request) -> InboundRequest:
        return InboundRequest(
            method=request.method,
            path=request.url.path,
            headers=dict(request.headers),
            request_id=request.headers.get('x-request-id'),
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """FastAPI middleware handler."""
        if request.url.path in self.skip_paths:
            return await call_next(request)

        result = await self.gateway.authorize(self._to_inbound(request))

        if not isinstance(result, Allowed):
            return JSONResponse(
                status_code=result.status,
                content=result.to_payload(),
                headers=result.headers,
            )

        request.state.authorization = result.context.to_dict()
        request.state.listing_filter = result.listing_filter

        response = await call_next(request)

        for key, value in result.headers.items():
            response.headers[key] = value

        return response
