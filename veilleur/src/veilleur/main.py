"""
Veilleur - Listener-first HTTP process supervisor

Binds the HTTP listener before touching any slow dependency, runs heavy
initialization behind it, and owns the shutdown sequence.
"""

import asyncio
import os
import sys
from typing import Optional

from shared.reporter import SystemReporter

from veilleur.application import Collaborators
from veilleur.config.settings import Settings, load_config
from veilleur.di import Container
from veilleur.domain.exceptions import ListenerBindError
from veilleur.infrastructure.http import HttpListener
from veilleur.infrastructure.monitoring import setup_logging
from veilleur.infrastructure.shutdown import EXIT_FORCED


class VeilleurApp:
    """
    Veilleur application orchestrator.

    Thin coordination layer that initializes and connects
    all Clean Architecture components.

    Responsibilities:
        - Initialize DI container
        - Install fault and signal routing
        - Open the primary listener (or the fallback)
        - Keep the process alive until the shutdown manager decides an
          exit code
    """

    def __init__(
        self,
        settings: Settings,
        collaborators: Optional[Collaborators] = None,
    ):
        """
        Initialize Veilleur application.

        Args:
            settings: Application settings
            collaborators: Heavy-init collaborators (loaded from settings
                when omitted)
        """
        self.settings = settings

        # Initialize reporter FIRST
        self.reporter = self._create_reporter()

        self.container = Container(
            settings,
            reporter=self.reporter,
            collaborators=collaborators,
        )

        # Serving listener (set during serve)
        self.listener: Optional[HttpListener] = None

        self.reporter.info(
            f"{settings.APP_NAME} initialized",
            context="Veilleur",
            verbose_level=2,
        )

    def _create_reporter(self) -> SystemReporter:
        """
        Create SystemReporter instance.

        Returns:
            Configured SystemReporter
        """
        log_dir = None

        if self.settings.LOG_FILE:
            log_dir = os.path.dirname(self.settings.LOG_FILE)
            if not log_dir:
                log_dir = "logs"

        return SystemReporter(
            name="veilleur",
            log_dir=log_dir,
            verbose=1,
        )

    async def serve(self, install_signal_handlers: bool = True) -> int:
        """
        Run the process until shutdown completes.

        Args:
            install_signal_handlers: Route SIGTERM/SIGINT to the shutdown
                manager (disable when embedding in another loop owner)

        Returns:
            Exit code decided by the shutdown manager

        Raises:
            ListenerBindError: If neither the primary nor any fallback
                listener could be opened
        """
        shutdown_manager = self.container.shutdown_manager
        fault_handler = self.container.fault_handler
        health_ticker = self.container.health_ticker

        fault_handler.install()
        shutdown_manager.register_cleanup_task(health_ticker.stop)
        if install_signal_handlers:
            shutdown_manager.setup_signal_handlers()

        try:
            try:
                self.listener = await self.container.sequencer.start()
            except Exception as e:
                self.listener = await self.container.fallback_listener.open(cause=e)

            shutdown_manager.attach_listener(self.listener)
            if shutdown_manager.is_running():
                health_ticker.start()

            self.reporter.info(
                "Server startup sequence completed successfully",
                context="Veilleur",
            )

            return await shutdown_manager.wait_for_exit()

        finally:
            await health_ticker.stop()
            fault_handler.uninstall()
            if install_signal_handlers:
                shutdown_manager.restore_signal_handlers()
            if self.listener is not None and not self.listener.closed:
                await self.listener.abort()

    def start(self) -> int:
        """
        Start Veilleur server.

        Blocks until the shutdown sequence finishes.

        Returns:
            Process exit code
        """
        return asyncio.run(self.serve())


def main():
    """
    Main entry point for Veilleur application.

    Loads configuration, starts the server and exits with the code the
    shutdown sequence decided.
    """
    # Load configuration
    config = load_config()

    app = VeilleurApp(config)

    # One log stream for root loggers and the reporter (JSON only in
    # production), stamped with the lifecycle phase
    setup_logging(
        level=config.LOG_LEVEL,
        json_logs=not config.is_development,
        lifecycle=app.container.lifecycle_state,
        reporters=(app.reporter,),
    )

    try:
        code = app.start()
    except ListenerBindError as e:
        app.reporter.critical(f"Failed to start server: {e}", context="Veilleur")
        app.reporter.flush()
        code = EXIT_FORCED
    except KeyboardInterrupt:
        code = 0

    sys.exit(code)


if __name__ == "__main__":
    main()
