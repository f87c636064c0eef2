"""
Integration tests for the shutdown sequence on a real listener.
"""

import asyncio
import os
import signal

import httpx

from veilleur.domain.lifecycle import LifecyclePhase
from veilleur.domain.shutdown import ShutdownReason


class TestShutdownSequence:
    """Integration tests for signals, faults and exit codes."""

    # ================================================================
    # Signal tests
    # ================================================================

    async def test_sigterm_exits_zero(self, run_app, settings, recorder, eventually):
        """Test a real SIGTERM closes the listener and exits 0."""
        app, task = await run_app(settings, recorder.build(), install_signal_handlers=True)
        state = app.container.lifecycle_state
        await eventually(lambda: state.phase is LifecyclePhase.READY)

        os.kill(os.getpid(), signal.SIGTERM)
        code = await asyncio.wait_for(task, timeout=5)

        assert code == 0
        assert app.listener.closed is True
        assert state.phase is LifecyclePhase.TERMINATED
        assert app.reporter.contains("Received SIGTERM, starting graceful shutdown")
        assert app.reporter.contains("HTTP server closed gracefully")

    async def test_duplicate_requests_one_sequence(self, run_app, settings, recorder):
        """Test SIGTERM then SIGINT produce a single close and exit."""
        app, task = await run_app(settings, recorder.build())
        manager = app.container.shutdown_manager

        assert manager.request_shutdown(ShutdownReason.SIGTERM) is True
        assert manager.request_shutdown(ShutdownReason.SIGINT) is False

        assert await asyncio.wait_for(task, timeout=5) == 0
        assert manager.ignored_requests == 1
        assert sum("HTTP server closed gracefully" in m for m in app.reporter.messages()) == 1

    async def test_stuck_request_forces_exit_one(
        self, run_app, base_url, settings_factory, recorder
    ):
        """Test an in-flight request past the hard ceiling exits 1."""
        entered = asyncio.Event()
        release = asyncio.Event()

        def register(app):
            @app.get("/api/slow")
            async def slow():
                entered.set()
                await release.wait()
                return {"done": True}

        settings = settings_factory(SHUTDOWN_HARD_TIMEOUT=0.5)
        app, task = await run_app(settings, recorder.build(register))
        await asyncio.wait_for(
            _wait_phase(app, LifecyclePhase.READY), timeout=3
        )

        client = httpx.AsyncClient(base_url=base_url(app), timeout=10)
        request = asyncio.create_task(client.get("/api/slow"))
        await asyncio.wait_for(entered.wait(), timeout=3)

        app.container.shutdown_manager.request_shutdown(ShutdownReason.SIGTERM)
        code = await asyncio.wait_for(task, timeout=5)

        release.set()
        request.cancel()
        await asyncio.gather(request, return_exceptions=True)
        await client.aclose()

        assert code == 1
        assert app.reporter.contains("Forcing shutdown after timeout")

    async def test_sigterm_refuses_new_connections_while_draining(
        self, run_app, base_url, settings, recorder
    ):
        """Test new connections are refused while an in-flight request drains."""
        entered = asyncio.Event()
        release = asyncio.Event()

        def register(app):
            @app.get("/api/slow")
            async def slow():
                entered.set()
                await release.wait()
                return {"done": True}

        app, task = await run_app(settings, recorder.build(register))
        await asyncio.wait_for(
            _wait_phase(app, LifecyclePhase.READY), timeout=3
        )
        url = base_url(app)

        async with httpx.AsyncClient(base_url=url, timeout=10) as client:
            request = asyncio.create_task(client.get("/api/slow"))
            await asyncio.wait_for(entered.wait(), timeout=3)

            app.container.shutdown_manager.request_shutdown(ShutdownReason.SIGTERM)

            assert await asyncio.wait_for(_refuses_connections(url), timeout=3)
            assert request.done() is False
            assert task.done() is False

            release.set()
            response = await asyncio.wait_for(request, timeout=3)

        assert response.status_code == 200
        assert response.json() == {"done": True}
        assert await asyncio.wait_for(task, timeout=5) == 0
        assert app.reporter.contains("HTTP server closed gracefully")

    # ================================================================
    # Fault tests
    # ================================================================

    async def test_uncaught_exception_shuts_down(self, run_app, settings, recorder):
        """Test an exception raised in a loop callback starts shutdown."""
        app, task = await run_app(settings, recorder.build())

        def explode():
            raise RuntimeError("callback failed")

        asyncio.get_running_loop().call_soon(explode)
        code = await asyncio.wait_for(task, timeout=5)

        assert code == 0
        assert app.container.shutdown_manager.request.reason is ShutdownReason.UNCAUGHT_EXCEPTION

    async def test_unhandled_rejection_ignored_in_production(
        self, run_app, base_url, settings, recorder
    ):
        """Test production logs an unhandled rejection and keeps serving."""
        app, task = await run_app(settings, recorder.build())

        _report_lost_future(ValueError("lost"))
        await asyncio.sleep(0.1)

        async with httpx.AsyncClient(base_url=base_url(app)) as client:
            response = await client.get("/")

        assert response.status_code == 200
        assert task.done() is False
        assert app.container.shutdown_manager.is_running() is True
        assert app.reporter.contains("Unhandled Rejection", level="error")

    async def test_unhandled_rejection_shuts_down_in_development(
        self, run_app, settings_factory, recorder
    ):
        """Test development shuts down on an unhandled rejection."""
        settings = settings_factory(NODE_ENV="development")
        app, task = await run_app(settings, recorder.build())

        _report_lost_future(ValueError("lost"))
        code = await asyncio.wait_for(task, timeout=5)

        assert code == 0
        assert app.container.shutdown_manager.request.reason is ShutdownReason.UNHANDLED_REJECTION


async def _wait_phase(app, phase):
    while app.container.lifecycle_state.phase is not phase:
        await asyncio.sleep(0.01)


def _report_lost_future(error: BaseException) -> None:
    """Report a failed future nobody awaited, as the event loop does."""
    loop = asyncio.get_running_loop()
    future = loop.create_future()
    future.set_exception(error)
    future.exception()
    loop.call_exception_handler(
        {
            "message": "Future exception was never retrieved",
            "exception": error,
            "future": future,
        }
    )


async def _refuses_connections(url: str) -> bool:
    """Poll with fresh connections until the listener refuses one."""
    while True:
        async with httpx.AsyncClient(base_url=url, timeout=1) as fresh:
            try:
                await fresh.get("/")
            except httpx.ConnectError:
                return True
        await asyncio.sleep(0.01)
