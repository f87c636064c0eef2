"""
Periodic uptime log line.
"""

import asyncio
from typing import Optional

from shared.reporter import SystemReporter

from veilleur.domain.lifecycle import ProcessLifecycleState


class HealthTicker:
    """
    Logs process uptime and phase at a fixed interval.

    Attributes:
        interval: Seconds between log lines (0 disables the ticker)
    """

    def __init__(
        self,
        state: ProcessLifecycleState,
        reporter: SystemReporter,
        interval: float,
    ):
        self.state = state
        self.reporter = reporter
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return self.interval > 0

    def start(self) -> None:
        if not self.enabled or self._task is not None:
            return
        self._task = asyncio.create_task(self._run(), name="veilleur-health-ticker")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while self.state.is_serving:
            await asyncio.sleep(self.interval)
            self.reporter.info(
                f"Server health check - uptime: {round(self.state.uptime_seconds())}s "
                f"(phase: {self.state.phase.value})",
                context="Health",
                verbose_level=1,
            )
