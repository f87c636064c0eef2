"""
Integration fixtures: VeilleurApp on a real ephemeral-port listener.
"""

import asyncio

import pytest

from veilleur.domain.shutdown import ShutdownReason
from veilleur.main import VeilleurApp


@pytest.fixture
async def run_app(reporter_factory, eventually):
    """Start VeilleurApp.serve() in a task and wait for the listener."""
    started = []

    async def _run(settings, collaborators, install_signal_handlers=False):
        app = VeilleurApp(settings, collaborators=collaborators)
        app.reporter = reporter_factory()
        app.container.reporter = app.reporter
        task = asyncio.create_task(
            app.serve(install_signal_handlers=install_signal_handlers)
        )
        await eventually(
            lambda: task.done() or (app.listener is not None and app.listener.is_listening)
        )
        if task.done():
            task.result()
        started.append((app, task))
        return app, task

    yield _run

    for app, task in started:
        if not task.done():
            app.container.shutdown_manager.request_shutdown(ShutdownReason.SIGTERM)
            await asyncio.wait_for(task, timeout=5)


@pytest.fixture
def base_url():
    def _base_url(app: VeilleurApp) -> str:
        return f"http://127.0.0.1:{app.listener.port}"

    return _base_url
