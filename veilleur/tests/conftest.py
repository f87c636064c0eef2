"""
Test fixtures and configuration.
"""

import asyncio
from typing import Any, Callable, List, Optional, Tuple

import pytest

from veilleur.application import Collaborators
from veilleur.config.settings import Settings
from veilleur.di import Container
from veilleur.domain.lifecycle import ProcessLifecycleState


class RecordingReporter:
    """
    Drop-in for SystemReporter that keeps every line in memory.
    """

    def __init__(self):
        self.records: List[Tuple[str, str, str]] = []
        self.flushed = 0

    def _record(self, level: str, msg: str, context: str) -> None:
        self.records.append((level, context, msg))

    def debug(self, msg: str, context: str = "system", verbose_level: int = 3) -> None:
        self._record("debug", msg, context)

    def info(self, msg: str, context: str = "system", verbose_level: int = 1) -> None:
        self._record("info", msg, context)

    def warning(self, msg: str, context: str = "system", verbose_level: int = 1) -> None:
        self._record("warning", msg, context)

    def error(self, msg: str, context: str = "system", verbose_level: int = 0, exc_info=None) -> None:
        self._record("error", msg, context)

    def critical(self, msg: str, context: str = "system", verbose_level: int = 0, exc_info=None) -> None:
        self._record("critical", msg, context)

    def flush(self) -> None:
        self.flushed += 1

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [msg for lvl, _, msg in self.records if level is None or lvl == level]

    def contains(self, text: str, level: Optional[str] = None) -> bool:
        return any(text in msg for msg in self.messages(level))


class CallRecorder:
    """
    Builds collaborators that record their invocation order.

    Steps listed in `failures` raise RuntimeError; steps listed in
    `blockers` wait on the matching asyncio.Event before returning.
    """

    def __init__(self, failures: Optional[dict] = None, blockers: Optional[dict] = None):
        self.calls: List[str] = []
        self.failures = failures or {}
        self.blockers = blockers or {}
        self.dev_server: Any = None

    async def _step(self, name: str) -> None:
        self.calls.append(name)
        if name in self.blockers:
            await self.blockers[name].wait()
        if name in self.failures:
            raise self.failures[name]

    def build(self, register: Optional[Callable] = None) -> Collaborators:
        async def initialize_database():
            await self._step("database")

        async def register_routes(app):
            await self._step("routes")
            if register is not None:
                register(app)
            return None

        async def setup_dev_assets(app, server):
            self.dev_server = server
            await self._step("dev_assets")

        def serve_static(app):
            self.calls.append("static")
            if "static" in self.failures:
                raise self.failures["static"]

        return Collaborators(
            initialize_database=initialize_database,
            register_routes=register_routes,
            setup_dev_assets=setup_dev_assets,
            serve_static=serve_static,
        )


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's environment defaults."""
    values = dict(
        NODE_ENV="production",
        PORT=0,
        INIT_TIMEOUT=5,
        SHUTDOWN_GRACE_DELAY=0.05,
        SHUTDOWN_HARD_TIMEOUT=3.0,
        FALLBACK_ATTEMPTS=2,
        FALLBACK_RETRY_DELAY=0.01,
        HEALTH_LOG_INTERVAL=0,
        ATTACHED_ASSETS_DIR="missing-attached-assets",
        STATIC_DIR="missing-static",
        DEV_ASSETS_DIR="missing-client",
        LOG_LEVEL="warning",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def lifecycle() -> ProcessLifecycleState:
    return ProcessLifecycleState()


@pytest.fixture
def recorder() -> CallRecorder:
    return CallRecorder()


@pytest.fixture
def container(settings, reporter, recorder) -> Container:
    return Container(settings, reporter=reporter, collaborators=recorder.build())


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    return make_settings


@pytest.fixture
def recorder_factory() -> Callable[..., CallRecorder]:
    return CallRecorder


@pytest.fixture
def reporter_factory() -> Callable[[], RecordingReporter]:
    return RecordingReporter


async def wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    """Poll predicate until true or fail after timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def eventually() -> Callable:
    return wait_until
