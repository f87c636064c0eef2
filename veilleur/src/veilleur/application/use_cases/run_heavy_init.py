"""
Run Heavy Init Use Case.

Deferred initialization performed after the listener is already
accepting connections.
"""

import asyncio
import contextlib
import inspect
from typing import Any, Callable, Optional

from fastapi import FastAPI

from shared.reporter import SystemReporter

from veilleur.application.collaborators import Collaborators
from veilleur.domain.exceptions import InitializationTimeoutError
from veilleur.domain.lifecycle import (
    InitializationFailure,
    LifecyclePhase,
    ProcessLifecycleState,
)

STEP_DATABASE = "database"
STEP_ROUTES = "routes"
STEP_ATTACHED_ASSETS = "attached_assets"
STEP_ASSETS = "assets"


class RunHeavyInitUseCase:
    """
    Drive database seeding, route registration and asset serving.

    Steps run strictly one after another:
        1. initialize_database()
        2. register_routes(app)
        3. attached assets mount
        4. setup_dev_assets(app, server) in development,
           serve_static(app) otherwise

    Any failure is contained: it is recorded on the lifecycle state, the
    phase moves to DEGRADED and the listener stays up.
    """

    def __init__(
        self,
        app: FastAPI,
        state: ProcessLifecycleState,
        collaborators: Collaborators,
        reporter: SystemReporter,
        attach_assets: Callable[[FastAPI], Any],
        development: bool,
        timeout: Optional[float] = None,
    ):
        """
        Initialize use case.

        Args:
            app: Live application whose route table is extended
            state: Process lifecycle state
            collaborators: Database/route/asset collaborators
            reporter: Component reporter
            attach_assets: Mounts the attached-assets directory
            development: Selects the dev-asset branch (fixed for the
                lifetime of the use case)
            timeout: Seconds before a stalled init degrades (None/0 = none)
        """
        self.app = app
        self.state = state
        self.collaborators = collaborators
        self.reporter = reporter
        self.attach_assets = attach_assets
        self.development = development
        self.timeout = timeout or None
        self.current_step: Optional[str] = None

    async def execute(self, server: Any = None) -> bool:
        """
        Run heavy initialization once.

        Args:
            server: Listener handed to the dev asset server when the route
                registrar does not return one

        Returns:
            True if every step succeeded, False otherwise
        """
        if not self.state.try_advance_to(LifecyclePhase.INITIALIZING):
            self.reporter.warning(
                f"Heavy initialization skipped (phase: {self.state.phase.value})",
                context="Bootstrap",
            )
            return False

        self.reporter.info(
            "Basic server ready - starting heavy initialization...",
            context="Bootstrap",
        )

        try:
            await self._run_bounded(server)
        except Exception as e:
            self._fail(e)
            return False

        if self.state.try_advance_to(LifecyclePhase.READY):
            self.reporter.info(
                "Server is fully ready to handle requests",
                context="Bootstrap",
            )
        else:
            self.reporter.info(
                "Heavy initialization finished after shutdown began",
                context="Bootstrap",
            )
        return True

    async def _run_bounded(self, server: Any) -> None:
        if self.timeout is None:
            await self._run_steps(server)
            return

        task = asyncio.ensure_future(self._run_steps(server))
        done, _ = await asyncio.wait({task}, timeout=self.timeout)
        if task not in done:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            raise InitializationTimeoutError(self.current_step, self.timeout)
        task.result()

    async def _run_steps(self, server: Any) -> None:
        self.current_step = STEP_DATABASE
        await self.collaborators.initialize_database()
        self.reporter.info("Database initialization complete", context="Bootstrap")

        self.current_step = STEP_ROUTES
        registered_server = await self.collaborators.register_routes(self.app)
        self.reporter.info("Routes registered successfully", context="Bootstrap")

        self.current_step = STEP_ATTACHED_ASSETS
        self.attach_assets(self.app)

        self.current_step = STEP_ASSETS
        if self.development:
            await self.collaborators.setup_dev_assets(
                self.app, registered_server or server
            )
            self.reporter.info(
                "Development asset serving setup complete",
                context="Bootstrap",
            )
        else:
            result = self.collaborators.serve_static(self.app)
            if inspect.isawaitable(result):
                await result
            self.reporter.info(
                "Static file serving configured for production",
                context="Bootstrap",
            )

    def _fail(self, error: Exception) -> None:
        step = self.current_step or "unknown"
        self.state.record_initialization_failure(
            InitializationFailure.from_exception(step, error)
        )
        self.reporter.error(
            f"Heavy initialization failed at '{step}': {error}",
            context="Bootstrap",
            exc_info=error,
        )

        if not self.state.try_advance_to(LifecyclePhase.DEGRADED):
            return

        if self.development:
            self.reporter.warning(
                "Continuing with minimal development server...",
                context="Bootstrap",
            )
        else:
            self.reporter.warning(
                "Continuing with minimal functionality for production deployment...",
                context="Bootstrap",
            )
