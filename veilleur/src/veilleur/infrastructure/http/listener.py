"""
HTTP listener built on uvicorn.

The socket is bound by Veilleur itself, before uvicorn starts, so that a
bind failure surfaces as ListenerBindError instead of uvicorn's
sys.exit(1). Signal handling is left to the ShutdownManager.
"""

import asyncio
import contextlib
import socket
from typing import Callable, List, Optional

import uvicorn
from fastapi import FastAPI

from shared.reporter import SystemReporter

from veilleur.domain.exceptions import ListenerBindError

ListeningCallback = Callable[["HttpListener"], None]


class _ManagedServer(uvicorn.Server):
    """
    uvicorn server that reports when its sockets are listening and never
    touches process signal handlers.
    """

    def __init__(self, config: uvicorn.Config, on_listening: Callable[[], None]):
        super().__init__(config)
        self._on_listening = on_listening

    @contextlib.contextmanager
    def capture_signals(self):
        yield

    def install_signal_handlers(self) -> None:
        return None

    async def startup(self, sockets: Optional[List[socket.socket]] = None) -> None:
        await super().startup(sockets=sockets)
        if self.started:
            self._on_listening()


class HttpListener:
    """
    One bound, serving HTTP socket.

    Attributes:
        app: ASGI application served
        host: Bind host
        port: Bound port (resolved after bind when 0 was requested)
        name: Label used in log lines
    """

    def __init__(
        self,
        app: FastAPI,
        host: str,
        port: int,
        reporter: SystemReporter,
        log_level: str = "info",
        name: str = "primary",
    ):
        self.app = app
        self.host = host
        self.port = port
        self.reporter = reporter
        self.log_level = log_level
        self.name = name

        self.server: Optional[_ManagedServer] = None
        self._socket: Optional[socket.socket] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._listening: Optional[asyncio.Future] = None
        self._on_listening: Optional[ListeningCallback] = None
        self._close_requested = False

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def is_listening(self) -> bool:
        return bool(self.server and self.server.started) and not self.closed

    @property
    def closed(self) -> bool:
        return self._serve_task is not None and self._serve_task.done()

    def bind(self) -> socket.socket:
        """
        Bind the listening socket.

        Raises:
            ListenerBindError: If the address cannot be bound
        """
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
        except OSError as e:
            sock.close()
            raise ListenerBindError(self.host, self.port, str(e)) from e

        sock.set_inheritable(True)
        self.port = sock.getsockname()[1]
        self._socket = sock
        return sock

    async def open(self, on_listening: Optional[ListeningCallback] = None) -> "HttpListener":
        """
        Bind and start serving; returns once the socket is listening.

        Args:
            on_listening: Called once, synchronously, when the socket is
                listening

        Raises:
            ListenerBindError: If binding or server startup fails
        """
        if self._serve_task is not None:
            raise RuntimeError(f"Listener '{self.name}' already opened")

        sock = self.bind()
        loop = asyncio.get_running_loop()
        self._listening = loop.create_future()
        self._on_listening = on_listening

        config = uvicorn.Config(
            self.app,
            log_level=self.log_level,
            log_config=None,
            access_log=False,
        )
        self.server = _ManagedServer(config, self._handle_listening)
        self._serve_task = asyncio.create_task(
            self.server.serve(sockets=[sock]),
            name=f"veilleur-listener-{self.name}",
        )

        done, _ = await asyncio.wait(
            {self._listening, self._serve_task},
            return_when=asyncio.FIRST_COMPLETED,
        )

        if self._listening not in done:
            # serve() returned (or raised) before the socket listened
            sock.close()
            error = self._serve_task.exception()
            reason = str(error) if error else "server exited during startup"
            raise ListenerBindError(self.host, self.port, reason) from error

        return self

    def _handle_listening(self) -> None:
        if self._listening is not None and not self._listening.done():
            self._listening.set_result(True)
        if self._on_listening is not None:
            self._on_listening(self)

    def close(self) -> bool:
        """
        Stop accepting new connections; in-flight requests may finish.

        Returns:
            True on the first call, False afterwards
        """
        if self._close_requested:
            return False
        self._close_requested = True
        if self.server is not None:
            self.server.should_exit = True
        return True

    async def wait_closed(self) -> None:
        """Wait until the server has stopped and released its socket."""
        if self._serve_task is None:
            return
        await asyncio.shield(self._serve_task)

    async def abort(self, timeout: float = 1.0) -> None:
        """
        Stop waiting for in-flight connections and tear the server down.
        """
        if self._serve_task is None or self._serve_task.done():
            return

        self.close()
        self.server.force_exit = True
        try:
            await asyncio.wait_for(asyncio.shield(self._serve_task), timeout)
        except asyncio.TimeoutError:
            self._serve_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._serve_task
        except Exception as e:
            self.reporter.warning(
                f"Listener '{self.name}' failed while aborting: {e}",
                context="Listener",
            )
