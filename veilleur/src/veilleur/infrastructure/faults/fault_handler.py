"""
Process-level fault routing.

Two kinds of faults reach the process boundary without being handled:

- uncaught exceptions: raised from event loop callbacks or from threads;
  always start a graceful shutdown
- unhandled rejections: exceptions stored on a future or task nobody
  awaited; logged always, shut down only in development
"""

import asyncio
import threading
from typing import Any, Dict, Optional

from shared.reporter import SystemReporter

from veilleur.domain.shutdown import ShutdownReason
from veilleur.infrastructure.shutdown import ShutdownManager


class FaultHandler:
    """
    Installs the loop exception handler and threading.excepthook.

    Attributes:
        shutdown_on_unhandled_rejection: Start shutdown on unhandled
            rejections (development only)
        uncaught_count: Uncaught exceptions seen
        rejection_count: Unhandled rejections seen
    """

    def __init__(
        self,
        shutdown_manager: ShutdownManager,
        reporter: SystemReporter,
        shutdown_on_unhandled_rejection: bool,
    ):
        self.shutdown_manager = shutdown_manager
        self.reporter = reporter
        self.shutdown_on_unhandled_rejection = shutdown_on_unhandled_rejection

        self.uncaught_count = 0
        self.rejection_count = 0

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._previous_loop_handler = None
        self._previous_excepthook = None

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Route loop and thread faults to this handler."""
        self._loop = loop or asyncio.get_running_loop()
        self._previous_loop_handler = self._loop.get_exception_handler()
        self._loop.set_exception_handler(self._loop_exception_handler)

        self._previous_excepthook = threading.excepthook
        threading.excepthook = self._thread_excepthook

    def uninstall(self) -> None:
        """Restore the handlers replaced by install()."""
        if self._loop is not None:
            self._loop.set_exception_handler(self._previous_loop_handler)
            self._loop = None

        if self._previous_excepthook is not None:
            threading.excepthook = self._previous_excepthook
            self._previous_excepthook = None

    # ================================================================
    # Fault entry points
    # ================================================================

    def handle_uncaught_exception(self, error: BaseException) -> None:
        """Log the error and start a graceful shutdown."""
        self.uncaught_count += 1
        self.reporter.error(
            f"Uncaught Exception: {error!r}",
            context="Fault",
            exc_info=error,
        )
        self.shutdown_manager.request_shutdown(ShutdownReason.UNCAUGHT_EXCEPTION)

    def handle_unhandled_rejection(self, error: BaseException, source: Any = None) -> None:
        """Log the error; start a shutdown only when configured to."""
        self.rejection_count += 1
        self.reporter.error(
            f"Unhandled Rejection at: {source!r} reason: {error!r}",
            context="Fault",
            exc_info=error,
        )
        if self.shutdown_on_unhandled_rejection:
            self.shutdown_manager.request_shutdown(ShutdownReason.UNHANDLED_REJECTION)

    # ================================================================
    # Hooks
    # ================================================================

    def _loop_exception_handler(
        self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]
    ) -> None:
        error = context.get("exception")
        if error is None:
            self.reporter.warning(
                f"Event loop: {context.get('message', 'unknown error')}",
                context="Fault",
            )
            return

        source = context.get("future") or context.get("task")
        if source is not None:
            self.handle_unhandled_rejection(error, source)
        else:
            self.handle_uncaught_exception(error)

    def _thread_excepthook(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            self._previous_excepthook(args)
            return

        loop.call_soon_threadsafe(self.handle_uncaught_exception, args.exc_value)
