"""
Process log stream configuration.

Root loggers (uvicorn included) and the component SystemReporter share one
stream: JSON lines in production, plain text in development. Every record
is stamped with the lifecycle phase it was emitted in and, inside a
request, the request ID.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Iterable, Optional
from uuid import uuid4

from shared.reporter import SystemReporter

from veilleur.domain.lifecycle import ProcessLifecycleState

# Context variable for request ID tracking
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
PLAIN_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
JSON_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}

# Stamped by LifecycleFilter / SystemReporter, emitted in a fixed order
_PROCESS_FIELDS = ("context", "phase", "initialized", "fallback_active")


class LifecycleFilter(logging.Filter):
    """
    Stamps each record with the current lifecycle phase.

    Attached to handlers, so records from child loggers are covered too.
    """

    def __init__(self, state: ProcessLifecycleState):
        super().__init__()
        self.state = state

    def filter(self, record: logging.LogRecord) -> bool:
        record.phase = self.state.phase.value
        record.initialized = self.state.initialized
        if self.state.fallback_active:
            record.fallback_active = True
        return True


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Schema: timestamp, level, logger, message, then the process fields
    (context, phase, initialized, fallback_active) when present, the
    request ID, the exception text and any `extra=` fields.
    """

    def __init__(self, datefmt: Optional[str] = JSON_DATE_FORMAT):
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in _PROCESS_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        request_id = request_id_ctx.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in log_data or key in _RECORD_ATTRS or key.startswith("_"):
                continue
            log_data[key] = value

        return json.dumps(log_data, default=str)


def _build_formatter(json_logs: bool) -> logging.Formatter:
    if json_logs:
        return JSONFormatter()
    return logging.Formatter(PLAIN_FORMAT, datefmt=PLAIN_DATE_FORMAT)


def setup_logging(
    level: str = "INFO",
    json_logs: bool = True,
    lifecycle: Optional[ProcessLifecycleState] = None,
    reporters: Iterable[SystemReporter] = (),
) -> None:
    """
    Configure the process log stream.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Use JSON format (True) or plain text (False)
        lifecycle: State whose phase is stamped on every record
        reporters: SystemReporters switched onto the same format; their
            file handlers are included
    """
    numeric = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric)
    handler.setFormatter(_build_formatter(json_logs))
    if lifecycle is not None:
        handler.addFilter(LifecycleFilter(lifecycle))
    root_logger.addHandler(handler)

    for reporter in reporters:
        bind_reporter(reporter, json_logs=json_logs, lifecycle=lifecycle)

    # Silence noisy loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def bind_reporter(
    reporter: SystemReporter,
    json_logs: bool,
    lifecycle: Optional[ProcessLifecycleState] = None,
) -> None:
    """
    Put a SystemReporter's handlers on the process log format.

    In plain mode the reporter keeps its own layout and only gains the
    lifecycle stamp.
    """
    for handler in reporter.logger.handlers:
        if json_logs:
            handler.setFormatter(JSONFormatter())
        if lifecycle is not None and not any(
            isinstance(f, LifecycleFilter) for f in handler.filters
        ):
            handler.addFilter(LifecycleFilter(lifecycle))


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set request ID for current context.

    Args:
        request_id: Request ID (generates UUID if None)

    Returns:
        Request ID that was set
    """
    if request_id is None:
        request_id = str(uuid4())
    request_id_ctx.set(request_id)
    return request_id


def get_logger(name: str) -> logging.Logger:
    """Get logger with given name (usually __name__)."""
    return logging.getLogger(name)
