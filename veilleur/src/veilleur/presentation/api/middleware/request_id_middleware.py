"""
Request ID middleware for request tracking.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from veilleur.infrastructure.monitoring.logger import request_id_ctx, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an ID visible to log records.

    The caller's X-Request-ID is reused when present. The ID is echoed on
    the response and exposed as request.state.request_id.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        token = request_id_ctx.set(None)
        try:
            request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
            request.state.request_id = request_id

            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_ctx.reset(token)
