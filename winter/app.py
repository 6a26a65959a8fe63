"""The application: configuration, the request loop and the command entry point."""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from winter.component import Component
from winter.http_server import HttpServer
from winter.log import LogLevel, get_logger
from winter.router import Router

_POLL_INTERVAL = 0.2


@dataclass
class Configuration:
    """Settings for the server and logging."""

    server_port: int = 8080
    max_connections: int = 10
    log_level: LogLevel = LogLevel.INFO
    host: str = "0.0.0.0"


class Winter:
    """Runs the HTTP server and routes each queued request until stopped."""

    def __init__(
        self,
        configuration: Optional[Configuration] = None,
        *,
        server: Any = None,
        router: Optional[Router] = None,
    ) -> None:
        self.configuration = configuration or Configuration()
        self.server = server if server is not None else HttpServer(
            port=self.configuration.server_port,
            max_connections=self.configuration.max_connections,
            host=self.configuration.host,
        )
        self.router = router if router is not None else Router()
        self.ready = threading.Event()
        self._stop = threading.Event()
        self._previous_handler: Any = None
        self._signal_installed = False

    def run(self) -> None:
        """Start the server, serve requests until :meth:`stop`, then shut down."""
        self._init()
        try:
            while not self._stop.is_set():
                self.handle_one(_POLL_INTERVAL)
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Ask the request loop to finish."""
        self._stop.set()

    def handle_one(self, timeout: Optional[float] = None) -> bool:
        """Route the next request; return False if none arrived within ``timeout``."""
        request = self.server.next_request(timeout)
        if request is None:
            return False
        try:
            self.router.route_request(request)
        except Exception as exc:
            get_logger().error("Could not answer request: {}", exc)
        return True

    def _on_signal(self, signum: int, frame: Any) -> None:
        get_logger().info("Received signal {}", signum)
        self.stop()

    def _init(self) -> None:
        get_logger().level = self.configuration.log_level
        if threading.current_thread() is threading.main_thread():
            self._previous_handler = signal.signal(signal.SIGINT, self._on_signal)
            self._signal_installed = True
        self.server.start()
        Component.initialize_components()
        self.ready.set()

    def _cleanup(self) -> None:
        get_logger().info("Shutting down")
        try:
            self.server.stop()
            self.router.close()
        finally:
            if self._signal_installed:
                signal.signal(signal.SIGINT, self._previous_handler)
                self._signal_installed = False
            self.ready.clear()


def _parse_args(argv: Optional[Sequence[str]]) -> Configuration:
    defaults = Configuration()
    parser = argparse.ArgumentParser(prog="winter", description="Run the Winter HTTP server.")
    parser.add_argument("--host", default=defaults.host)
    parser.add_argument("--port", type=int, default=defaults.server_port)
    parser.add_argument("--max-connections", type=int, default=defaults.max_connections)
    parser.add_argument(
        "--log-level",
        choices=[level.name for level in LogLevel],
        default=defaults.log_level.name,
    )
    args = parser.parse_args(argv)
    return Configuration(
        server_port=args.port,
        max_connections=args.max_connections,
        log_level=LogLevel[args.log_level],
        host=args.host,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the server with the example controller; return the exit status."""
    from winter.example import MyController, register_routes

    configuration = _parse_args(argv)
    app = Winter(configuration)
    try:
        Component.initialize_components()
        register_routes(app.router, Component.get_component(MyController))
        app.run()
    except Exception as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())