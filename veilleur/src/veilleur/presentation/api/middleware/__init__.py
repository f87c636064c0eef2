"""
API middleware for Veilleur.
"""

from veilleur.presentation.api.middleware.api_logging_middleware import (
    ApiLoggingMiddleware,
    format_api_log_line,
)
from veilleur.presentation.api.middleware.error_handler import (
    unhandled_exception_handler,
    veilleur_exception_handler,
)
from veilleur.presentation.api.middleware.request_id_middleware import (
    RequestIDMiddleware,
)

__all__ = [
    "ApiLoggingMiddleware",
    "RequestIDMiddleware",
    "format_api_log_line",
    "unhandled_exception_handler",
    "veilleur_exception_handler",
]
