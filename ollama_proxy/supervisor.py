"""
Start/stop control for the proxy's HTTP server.

The host application may call start()/stop() from any thread. uvicorn runs on
its own daemon thread with its own event loop; transitions are serialized by
a lock so the reported state always matches the bound port.
"""
import logging
import socket
import threading
import time
from enum import Enum
from typing import Callable, Optional

import uvicorn

from .config import Settings
from .errors import PortInUseError, ServerStartError
from .provider import LLMProvider
from .server import create_app

logger = logging.getLogger(__name__)

_WILDCARD_HOSTS = {"", "0.0.0.0", "::"}


class ServerState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


def is_port_in_use(host: str, port: int, timeout: float = 1.0) -> bool:
    """Return True if something accepts TCP connections on host:port."""
    if host in _WILDCARD_HOSTS:
        host = "127.0.0.1"
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class ServerSupervisor:
    """Owns the running/not-running state of the HTTP server."""

    def __init__(self, settings_factory: Callable[[], Settings] = Settings):
        # Called on every start() so persisted changes apply after a restart
        self._settings_factory = settings_factory
        self._lock = threading.Lock()
        self._state = ServerState.STOPPED
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        # Settings in effect for the running server
        self._active: Optional[Settings] = None

    @property
    def state(self) -> ServerState:
        return self._state

    def is_running(self) -> bool:
        return (
            self._state == ServerState.RUNNING
            and self._thread is not None
            and self._thread.is_alive()
        )

    def start(self, provider: LLMProvider) -> None:
        """
        Start serving on the configured port.

        No-op if already running. Settings are read fresh from the factory
        here, so a changed port takes effect on the next stop/start cycle.

        Raises:
            PortInUseError: something already listens on the port
            ServerStartError: the server failed to bind or come up in time
        """
        with self._lock:
            if self.is_running():
                return
            if self._thread is not None:
                # The server thread died on its own; forget it
                self._reset()

            settings = self._settings_factory()
            port = settings.port
            self._state = ServerState.STARTING

            if is_port_in_use(settings.host, port):
                self._state = ServerState.STOPPED
                logger.error("Port %d is already in use. Cannot start server.", port)
                raise PortInUseError(port)

            config = uvicorn.Config(
                create_app(provider),
                host=settings.host,
                port=port,
                loop="asyncio",
                log_config=None,
                log_level=settings.log_level.lower(),
                timeout_graceful_shutdown=settings.shutdown_grace_period,
            )
            server = uvicorn.Server(config)
            thread = threading.Thread(
                target=server.run,
                name=f"ollama-proxy-{port}",
                daemon=True,
            )
            thread.start()

            deadline = time.monotonic() + settings.startup_timeout
            while not server.started:
                if not thread.is_alive() or time.monotonic() > deadline:
                    break
                time.sleep(0.05)

            if not server.started:
                server.should_exit = True
                thread.join(settings.shutdown_timeout)
                self._state = ServerState.STOPPED
                logger.error("Failed to start server on port %d", port)
                raise ServerStartError(f"Server failed to start on port {port}")

            self._server = server
            self._thread = thread
            self._active = settings
            self._state = ServerState.RUNNING
            logger.info("Server started successfully on port %d", port)

    def stop(self) -> None:
        """Stop the server. Safe to call when already stopped."""
        with self._lock:
            if self._server is None or self._thread is None:
                self._state = ServerState.STOPPED
                return

            settings = self._active
            logger.info("Stopping server...")

            # In-flight requests get the grace period, then are cancelled
            self._server.should_exit = True
            self._thread.join(settings.shutdown_grace_period + settings.shutdown_timeout)
            if self._thread.is_alive():
                logger.warning("Server did not stop in time, forcing exit")
                self._server.force_exit = True
                self._thread.join(settings.shutdown_timeout)

            self._reset()

            time.sleep(settings.port_release_delay)
            if is_port_in_use(settings.host, settings.port):
                logger.error("Port %d still in use after server stop", settings.port)
            else:
                logger.info("Server port successfully released")

    def _reset(self) -> None:
        self._server = None
        self._thread = None
        self._active = None
        self._state = ServerState.STOPPED
