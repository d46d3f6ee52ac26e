"""
Ollama Proxy - standalone runner.

Plays the host application: reads settings, starts the supervisor with the
Anthropic provider and stops it on SIGINT/SIGTERM.
"""

import signal
import sys
import threading

from .anthropic_provider import AnthropicProvider
from .config import get_settings, setup_logging
from .errors import PortInUseError, ServerStartError
from .supervisor import ServerSupervisor


def main() -> int:
    settings = get_settings()
    logger = setup_logging(settings)

    supervisor = ServerSupervisor()
    stop_requested = threading.Event()

    def request_stop(signum, frame):
        logger.info("Received signal %d", signum)
        stop_requested.set()

    signal.signal(signal.SIGINT, request_stop)
    signal.signal(signal.SIGTERM, request_stop)

    try:
        supervisor.start(AnthropicProvider.from_settings(settings))
    except (PortInUseError, ServerStartError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Ollama proxy available at http://%s:%d", settings.host, settings.port)
    while not stop_requested.wait(0.5):
        if not supervisor.is_running():
            logger.error("Server stopped unexpectedly")
            return 1

    supervisor.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
