"""
Dependency Injection container for Veilleur.

Manages lifecycle and dependencies of all application components.
"""

from functools import partial
from typing import Optional

from fastapi import FastAPI

from shared.reporter import SystemReporter

from veilleur.application import Collaborators
from veilleur.application.use_cases import ReportHealthUseCase, RunHeavyInitUseCase
from veilleur.config.settings import Settings
from veilleur.domain.lifecycle import ProcessLifecycleState
from veilleur.infrastructure.bootstrap import BootstrapSequencer
from veilleur.infrastructure.collaborators import load_collaborators
from veilleur.infrastructure.collaborators.defaults import mount_directory
from veilleur.infrastructure.faults import FaultHandler
from veilleur.infrastructure.http import FallbackListener
from veilleur.infrastructure.monitoring import HealthTicker, LifecycleHealthChecker
from veilleur.infrastructure.shutdown import ShutdownManager


class Container:
    """
    Dependency Injection container.

    Creates and manages all application dependencies.
    Every component is a per-container singleton; the lifecycle state in
    particular is shared by reference between its readers and writers.
    """

    def __init__(
        self,
        settings: Settings,
        reporter: SystemReporter,
        collaborators: Optional[Collaborators] = None,
    ):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: Component reporter
            collaborators: Heavy-init collaborators (loaded from settings
                when omitted)
        """
        self.settings = settings
        self.reporter = reporter

        self._collaborators = collaborators
        self._lifecycle_state: Optional[ProcessLifecycleState] = None
        self._app: Optional[FastAPI] = None
        self._shutdown_manager: Optional[ShutdownManager] = None
        self._fault_handler: Optional[FaultHandler] = None
        self._health_checker: Optional[LifecycleHealthChecker] = None
        self._health_ticker: Optional[HealthTicker] = None
        self._report_health_use_case: Optional[ReportHealthUseCase] = None
        self._heavy_init_use_case: Optional[RunHeavyInitUseCase] = None
        self._sequencer: Optional[BootstrapSequencer] = None
        self._fallback_listener: Optional[FallbackListener] = None

    @property
    def collaborators(self) -> Collaborators:
        """
        Get collaborators, resolving configured import paths once.

        Raises:
            CollaboratorLoadError: If a configured path cannot be imported
        """
        if self._collaborators is None:
            self._collaborators = load_collaborators(self.settings)
        return self._collaborators

    @property
    def lifecycle_state(self) -> ProcessLifecycleState:
        if self._lifecycle_state is None:
            self._lifecycle_state = ProcessLifecycleState()
        return self._lifecycle_state

    @property
    def app(self) -> FastAPI:
        """
        Get primary FastAPI application (health routes registered).

        Returns:
            FastAPI instance extended in place by heavy init
        """
        if self._app is None:
            from veilleur.presentation.api.app_factory import create_app

            self._app = create_app(self)
        return self._app

    def create_fallback_app(self) -> FastAPI:
        """
        Build a fresh health-only application for the fallback listener.
        """
        from veilleur.presentation.api.app_factory import create_app

        return create_app(self, fallback=True)

    @property
    def shutdown_manager(self) -> ShutdownManager:
        """
        Get ShutdownManager singleton.

        Returns:
            ShutdownManager instance
        """
        if self._shutdown_manager is None:
            self._shutdown_manager = ShutdownManager(
                lifecycle=self.lifecycle_state,
                reporter=self.reporter,
                grace_delay=self.settings.SHUTDOWN_GRACE_DELAY,
                hard_timeout=self.settings.SHUTDOWN_HARD_TIMEOUT,
            )
        return self._shutdown_manager

    @property
    def fault_handler(self) -> FaultHandler:
        if self._fault_handler is None:
            self._fault_handler = FaultHandler(
                shutdown_manager=self.shutdown_manager,
                reporter=self.reporter,
                shutdown_on_unhandled_rejection=self.settings.is_development,
            )
        return self._fault_handler

    @property
    def health_checker(self) -> LifecycleHealthChecker:
        if self._health_checker is None:
            self._health_checker = LifecycleHealthChecker(
                state=self.lifecycle_state,
                version=self.settings.APP_VERSION,
            )
        return self._health_checker

    @property
    def health_ticker(self) -> HealthTicker:
        if self._health_ticker is None:
            self._health_ticker = HealthTicker(
                state=self.lifecycle_state,
                reporter=self.reporter,
                interval=self.settings.HEALTH_LOG_INTERVAL,
            )
        return self._health_ticker

    @property
    def report_health_use_case(self) -> ReportHealthUseCase:
        if self._report_health_use_case is None:
            self._report_health_use_case = ReportHealthUseCase(
                state=self.lifecycle_state,
                environment=self.settings.environment,
            )
        return self._report_health_use_case

    @property
    def heavy_init_use_case(self) -> RunHeavyInitUseCase:
        """
        Get RunHeavyInitUseCase singleton.

        The development flag is read here, once, and fixed for the
        lifetime of the use case.
        """
        if self._heavy_init_use_case is None:
            self._heavy_init_use_case = RunHeavyInitUseCase(
                app=self.app,
                state=self.lifecycle_state,
                collaborators=self.collaborators,
                reporter=self.reporter,
                attach_assets=partial(
                    mount_directory,
                    path="/attached_assets",
                    directory=self.settings.ATTACHED_ASSETS_DIR,
                    name="attached_assets",
                ),
                development=self.settings.is_development,
                timeout=self.settings.INIT_TIMEOUT,
            )
        return self._heavy_init_use_case

    @property
    def sequencer(self) -> BootstrapSequencer:
        if self._sequencer is None:
            self._sequencer = BootstrapSequencer(
                settings=self.settings,
                app=self.app,
                heavy_init=self.heavy_init_use_case,
                reporter=self.reporter,
            )
        return self._sequencer

    @property
    def fallback_listener(self) -> FallbackListener:
        if self._fallback_listener is None:
            self._fallback_listener = FallbackListener(
                app_factory=self.create_fallback_app,
                state=self.lifecycle_state,
                reporter=self.reporter,
                host=self.settings.bind_host,
                port=self.settings.PORT,
                attempts=self.settings.FALLBACK_ATTEMPTS,
                retry_delay=self.settings.FALLBACK_RETRY_DELAY,
                log_level=self.settings.LOG_LEVEL,
            )
        return self._fallback_listener
