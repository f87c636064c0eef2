"""
API request logging middleware.

One line per request under the API prefix:

    GET /api/items 200 in 12ms :: {"items":[]}
"""

import json
import time
from typing import Any, Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from veilleur.infrastructure.monitoring.logger import get_logger

logger = get_logger("veilleur.api")

ELLIPSIS = "…"
_NO_PAYLOAD = object()


def format_api_log_line(
    method: str,
    path: str,
    status_code: int,
    duration_ms: int,
    payload: Any = _NO_PAYLOAD,
    max_length: int = 80,
) -> str:
    """
    Build the log line for one API request.

    Args:
        method: HTTP method
        path: Request path (no query string)
        status_code: Response status
        duration_ms: Handling time in whole milliseconds
        payload: Decoded JSON response body, if any
        max_length: Longest line emitted; longer lines are cut and end
            with an ellipsis

    Returns:
        Log line
    """
    line = f"{method} {path} {status_code} in {duration_ms}ms"
    if payload is not _NO_PAYLOAD and payload is not None:
        line += " :: " + json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

    if len(line) > max_length:
        line = line[: max_length - 1] + ELLIPSIS
    return line


class ApiLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status, duration and JSON body of API requests.

    Requests outside the prefix pass through untouched.
    """

    def __init__(self, app: ASGIApp, prefix: str = "/api", max_length: int = 80):
        super().__init__(app)
        self.prefix = prefix
        self.max_length = max_length

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not path.startswith(self.prefix):
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)

        payload: Any = _NO_PAYLOAD
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            body = b""
            async for chunk in response.body_iterator:
                body += chunk
            payload = self._decode(body)
            response = self._rebuild(response, body)

        duration_ms = round((time.perf_counter() - start) * 1000)
        logger.info(
            format_api_log_line(
                request.method,
                path,
                response.status_code,
                duration_ms,
                payload,
                self.max_length,
            )
        )
        return response

    @staticmethod
    def _decode(body: bytes) -> Optional[Any]:
        if not body:
            return None
        try:
            return json.loads(body)
        except ValueError:
            return None

    @staticmethod
    def _rebuild(response: Response, body: bytes) -> Response:
        rebuilt = Response(
            content=body,
            status_code=response.status_code,
            background=response.background,
        )
        # Keep repeated headers (set-cookie) intact
        rebuilt.raw_headers = list(response.raw_headers)
        return rebuilt
