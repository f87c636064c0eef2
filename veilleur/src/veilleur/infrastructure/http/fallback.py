"""
Last-resort listener used when the primary bootstrap path fails.

Serves the health routes only, on the same host/port contract as the
primary listener, so orchestration health checks can still observe the
process.
"""

import asyncio
from typing import Callable, Optional

from fastapi import FastAPI

from shared.reporter import SystemReporter

from veilleur.domain.exceptions import ListenerBindError
from veilleur.domain.lifecycle import ProcessLifecycleState
from veilleur.infrastructure.http.listener import HttpListener


class FallbackListener:
    """
    Opens a health-only listener after a failed start().

    The first attempt is the fallback; any further attempts are emergency
    fallbacks.

    Attributes:
        attempts: Number of listen attempts (0 disables the fallback)
        retry_delay: Seconds between attempts
    """

    def __init__(
        self,
        app_factory: Callable[[], FastAPI],
        state: ProcessLifecycleState,
        reporter: SystemReporter,
        host: str,
        port: int,
        attempts: int = 2,
        retry_delay: float = 1.0,
        log_level: str = "info",
    ):
        self.app_factory = app_factory
        self.state = state
        self.reporter = reporter
        self.host = host
        self.port = port
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.log_level = log_level

    @staticmethod
    def attempt_label(attempt: int) -> str:
        return "fallback" if attempt == 1 else "emergency fallback"

    async def open(self, cause: Optional[BaseException] = None) -> HttpListener:
        """
        Try to open the health-only listener.

        Args:
            cause: Error that made the primary start fail (logged)

        Returns:
            Listening HttpListener

        Raises:
            ListenerBindError: If every attempt fails
        """
        if cause is not None:
            self.reporter.error(
                f"Server startup failed: {cause}",
                context="Fallback",
            )

        last_error: Optional[BaseException] = cause

        for attempt in range(1, self.attempts + 1):
            label = self.attempt_label(attempt)
            self.reporter.info(
                f"Attempting minimal {label} startup on {self.host}:{self.port}",
                context="Fallback",
            )

            listener = HttpListener(
                self.app_factory(),
                host=self.host,
                port=self.port,
                reporter=self.reporter,
                log_level=self.log_level,
                name=label.replace(" ", "-"),
            )

            try:
                await listener.open()
            except ListenerBindError as e:
                last_error = e
                self.reporter.error(
                    f"Minimal {label} server failed: {e}",
                    context="Fallback",
                )
                if attempt < self.attempts:
                    await asyncio.sleep(self.retry_delay)
                continue

            self.state.mark_fallback_active()
            self.reporter.warning(
                f"Minimal {label} server listening on {listener.url}",
                context="Fallback",
            )
            return listener

        raise ListenerBindError(
            self.host,
            self.port,
            f"no listener could be opened after {self.attempts} fallback attempt(s)"
            + (f" (last error: {last_error})" if last_error else ""),
        ) from last_error
