"""
Graceful shutdown manager.

Handles:
- Signal registration (SIGTERM, SIGINT)
- Shutdown state tracking
- Listener close with in-flight request completion
- Grace delay before a clean exit
- Hard ceiling forcing exit when the close stalls
"""

import asyncio
import signal
from enum import Enum
from typing import Callable, List, Optional

from shared.reporter import SystemReporter

from veilleur.domain.lifecycle import LifecyclePhase, ProcessLifecycleState
from veilleur.domain.shutdown import ShutdownReason, ShutdownRequest

EXIT_OK = 0
EXIT_FORCED = 1


class ShutdownState(Enum):
    """Shutdown state enum."""

    RUNNING = "running"
    CLOSING = "closing"
    EXIT_SOON = "exit_soon"
    TERMINATED = "terminated"
    FORCED_EXIT = "forced_exit"


class ShutdownManager:
    """
    Manages graceful shutdown of the Veilleur process.

    Coordinates shutdown sequence:
    1. Catch shutdown signal or fault
    2. Stop accepting new connections
    3. Wait for in-flight requests to finish
    4. Exit(0) after the grace delay once the listener is closed
    5. Exit(1) when the hard ceiling elapses first

    Attributes:
        state: Current shutdown state
        grace_delay: Seconds between listener close and exit(0)
        hard_timeout: Seconds after shutdown start before exit(1)
        request: The request that started the sequence
        exit_code: Exit code once decided
        ignored_requests: Requests received while already shutting down
    """

    def __init__(
        self,
        lifecycle: ProcessLifecycleState,
        reporter: SystemReporter,
        grace_delay: float = 1.0,
        hard_timeout: float = 10.0,
        exit_handler: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize shutdown manager.

        Args:
            lifecycle: Process lifecycle state advanced on shutdown
            reporter: Component reporter
            grace_delay: Seconds to wait after listener close before exit
            hard_timeout: Maximum seconds for the whole sequence
            exit_handler: Called once with the exit code; defaults to
                resolving the future awaited by wait_for_exit()
        """
        self.lifecycle = lifecycle
        self.reporter = reporter
        self.grace_delay = grace_delay
        self.hard_timeout = hard_timeout
        self._exit_handler = exit_handler or self._resolve_exit

        self.state = ShutdownState.RUNNING
        self.request: Optional[ShutdownRequest] = None
        self.exit_code: Optional[int] = None
        self.ignored_requests = 0

        self._listener = None
        self._listener_attached = asyncio.Event()
        self._close_requested = False
        self._cleanup_callbacks: List[Callable] = []
        self._exit_future: Optional[asyncio.Future] = None
        self._close_task: Optional[asyncio.Task] = None
        self._grace_handle: Optional[asyncio.TimerHandle] = None
        self._hard_handle: Optional[asyncio.TimerHandle] = None
        self._signal_loop: Optional[asyncio.AbstractEventLoop] = None
        self._installed_signals: List[signal.Signals] = []

    # ================================================================
    # State
    # ================================================================

    def is_running(self) -> bool:
        """
        Check if service is running normally.

        Returns:
            True if running, False if shutting down
        """
        return self.state == ShutdownState.RUNNING

    def is_shutting_down(self) -> bool:
        """
        Check if shutdown is in progress or done.

        Returns:
            True if shutting down, False otherwise
        """
        return self.state != ShutdownState.RUNNING

    @property
    def timers_armed(self) -> int:
        """Number of exit timers currently pending."""
        return sum(
            1
            for handle in (self._grace_handle, self._hard_handle)
            if handle is not None and not handle.cancelled()
        )

    # ================================================================
    # Wiring
    # ================================================================

    def attach_listener(self, listener) -> None:
        """
        Set the listener closed on shutdown.

        A listener attached after shutdown started is closed immediately;
        the pending close sequence then waits for it to drain.
        """
        self._listener = listener
        if listener is None:
            return
        self._listener_attached.set()
        if self.is_shutting_down():
            self._request_close(listener)

    def register_cleanup_task(self, callback: Callable) -> None:
        """
        Register callback run when shutdown starts, before listener close.

        Args:
            callback: Sync or async callable without arguments
        """
        self._cleanup_callbacks.append(callback)

    def setup_signal_handlers(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Route SIGTERM (container stop) and SIGINT (Ctrl+C) to shutdown.
        """
        loop = loop or asyncio.get_running_loop()
        self._signal_loop = loop

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._handle_signal, sig)
            except NotImplementedError:
                # Windows event loops: fall back to a plain handler
                signal.signal(
                    sig,
                    lambda signum, frame: loop.call_soon_threadsafe(
                        self._handle_signal, signal.Signals(signum)
                    ),
                )
            self._installed_signals.append(sig)

        self.reporter.info(
            "Signal handlers registered for graceful shutdown",
            context="Startup",
        )

    def restore_signal_handlers(self) -> None:
        """Remove the handlers installed by setup_signal_handlers()."""
        for sig in self._installed_signals:
            try:
                self._signal_loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                signal.signal(sig, signal.SIG_DFL)
        self._installed_signals.clear()

    def _handle_signal(self, sig: signal.Signals) -> None:
        self.request_shutdown(ShutdownReason.from_signal_name(sig.name))

    # ================================================================
    # Shutdown sequence
    # ================================================================

    def request_shutdown(self, reason: ShutdownReason) -> bool:
        """
        Start the shutdown sequence. Must be called on the event loop.

        Args:
            reason: What triggered the request

        Returns:
            True if this call started the sequence, False if one was
            already active
        """
        request = ShutdownRequest(reason=reason)

        if self.state != ShutdownState.RUNNING:
            self.ignored_requests += 1
            self.reporter.info(
                f"Received {reason.value} while shutdown already in progress, ignoring",
                context="Shutdown",
            )
            return False

        self.request = request
        self.state = ShutdownState.CLOSING
        self.lifecycle.try_advance_to(LifecyclePhase.SHUTTING_DOWN)

        self.reporter.info(
            f"Received {reason.value}, starting graceful shutdown...",
            context="Shutdown",
        )

        loop = asyncio.get_running_loop()
        self._hard_handle = loop.call_later(self.hard_timeout, self._force_exit)
        self._close_task = loop.create_task(
            self._close_listener(), name="veilleur-shutdown"
        )
        return True

    async def _close_listener(self) -> None:
        await self._run_cleanup_callbacks()

        if self._listener is None:
            # Still binding; the hard ceiling covers a listener that never opens
            self.reporter.info(
                "Shutdown requested before the listener opened, waiting for it",
                context="Shutdown",
            )
            await self._listener_attached.wait()

        listener = self._listener
        self._request_close(listener)
        try:
            await listener.wait_closed()
        except Exception as e:
            self.reporter.error(
                f"Listener failed while closing: {e}",
                context="Shutdown",
            )

        if self.state != ShutdownState.CLOSING:
            return

        self.reporter.info("HTTP server closed gracefully", context="Shutdown")
        self.state = ShutdownState.EXIT_SOON
        self._grace_handle = asyncio.get_running_loop().call_later(
            self.grace_delay, self._graceful_exit
        )

    def _request_close(self, listener) -> None:
        if self._close_requested:
            return
        self._close_requested = True
        listener.close()

    async def _run_cleanup_callbacks(self) -> None:
        for callback in self._cleanup_callbacks:
            try:
                if asyncio.iscoroutinefunction(callback):
                    await callback()
                else:
                    callback()
            except Exception as e:
                # Continue shutdown even if callback fails
                self.reporter.error(
                    f"Shutdown callback failed: {e}",
                    context="Shutdown",
                )

    def _graceful_exit(self) -> None:
        if self.state != ShutdownState.EXIT_SOON:
            return
        self.state = ShutdownState.TERMINATED
        self._finish(EXIT_OK)

    def _force_exit(self) -> None:
        if self.state in (ShutdownState.TERMINATED, ShutdownState.FORCED_EXIT):
            return
        self.reporter.warning("Forcing shutdown after timeout", context="Shutdown")
        self.state = ShutdownState.FORCED_EXIT
        self._finish(EXIT_FORCED)

    def _finish(self, code: int) -> None:
        for handle in (self._grace_handle, self._hard_handle):
            if handle is not None:
                handle.cancel()

        self.exit_code = code
        self.lifecycle.try_advance_to(LifecyclePhase.TERMINATED)
        self.reporter.info(f"Exiting with code {code}", context="Shutdown")
        self.reporter.flush()
        self._exit_handler(code)

    # ================================================================
    # Exit delivery
    # ================================================================

    def _get_exit_future(self) -> asyncio.Future:
        if self._exit_future is None:
            self._exit_future = asyncio.get_running_loop().create_future()
        return self._exit_future

    def _resolve_exit(self, code: int) -> None:
        future = self._get_exit_future()
        if not future.done():
            future.set_result(code)

    async def wait_for_exit(self) -> int:
        """
        Wait until an exit code is decided.

        Returns:
            Process exit code (0 graceful, 1 forced)
        """
        if self.exit_code is not None:
            return self.exit_code
        return await self._get_exit_future()

    def get_shutdown_info(self) -> dict:
        """
        Get shutdown status information.

        Returns:
            Dictionary with shutdown status details
        """
        return {
            "state": self.state.value,
            "is_shutting_down": self.is_shutting_down(),
            "reason": self.request.reason.value if self.request else None,
            "shutdown_started_at": (
                self.request.received_at.isoformat() if self.request else None
            ),
            "grace_delay": self.grace_delay,
            "hard_timeout": self.hard_timeout,
            "exit_code": self.exit_code,
        }
