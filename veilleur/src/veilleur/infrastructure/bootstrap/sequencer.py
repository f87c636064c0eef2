"""
Bootstrap sequencer.

Brings the process from cold start to a request-serving state before any
slow dependency is touched, then runs heavy initialization in the
background.
"""

import asyncio
from typing import Callable, Optional

from fastapi import FastAPI

from shared.reporter import SystemReporter

from veilleur.application.use_cases import RunHeavyInitUseCase
from veilleur.config.settings import Settings
from veilleur.infrastructure.http.listener import HttpListener

ListenerFactory = Callable[..., HttpListener]


class BootstrapSequencer:
    """
    Listener-first startup.

    Order:
    1. Bind the listener (health routes are already registered)
    2. On the listener's "listening" callback, schedule heavy init once
    3. Heavy init runs in its own task; failures leave the process
       degraded but serving

    Attributes:
        listener: Primary listener once start() succeeded
    """

    def __init__(
        self,
        settings: Settings,
        app: FastAPI,
        heavy_init: RunHeavyInitUseCase,
        reporter: SystemReporter,
        listener_factory: ListenerFactory = HttpListener,
    ):
        self.settings = settings
        self.app = app
        self.heavy_init = heavy_init
        self.reporter = reporter
        self.listener_factory = listener_factory

        self.listener: Optional[HttpListener] = None
        self._heavy_init_task: Optional[asyncio.Task] = None

    @property
    def heavy_init_started(self) -> bool:
        return self._heavy_init_task is not None

    async def start(self) -> HttpListener:
        """
        Bind and serve the primary listener.

        Returns:
            The listening HttpListener

        Raises:
            ListenerBindError: If the listener cannot be opened
        """
        self.reporter.info(
            f"Starting {self.settings.APP_NAME} server...",
            context="Bootstrap",
        )

        listener = self.listener_factory(
            self.app,
            host=self.settings.bind_host,
            port=self.settings.PORT,
            reporter=self.reporter,
            log_level=self.settings.LOG_LEVEL,
        )
        await listener.open(on_listening=self._on_listening)
        self.listener = listener
        return listener

    def _on_listening(self, listener: HttpListener) -> None:
        self.reporter.info(
            f"Server is running on {listener.url}",
            context="Bootstrap",
        )
        self.reporter.info(
            f"Environment: {self.settings.environment}",
            context="Bootstrap",
        )

        if self._heavy_init_task is not None:
            return

        self._heavy_init_task = asyncio.create_task(
            self.run_heavy_init(listener),
            name="veilleur-heavy-init",
        )

    async def run_heavy_init(self, server: Optional[HttpListener] = None) -> bool:
        """
        Run heavy initialization against the live app.

        Returns:
            True if initialization fully succeeded
        """
        return await self.heavy_init.execute(server=server or self.listener)
