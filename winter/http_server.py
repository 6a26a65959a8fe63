"""A threaded TCP listener that turns connections into queued HTTP requests."""

from __future__ import annotations

import contextlib
import queue
import socket
import threading
from typing import Any, Optional, Union

from winter.http_constants import HttpCode
from winter.http_request import HttpRequest
from winter.http_response import HttpResponse
from winter.log import get_logger

_BUFFER_SIZE = 4096
_POLL_INTERVAL = 0.2


class HttpConnection:
    """One accepted client socket carrying a single request and its response."""

    def __init__(
        self,
        sock: socket.socket,
        address: Any = None,
        *,
        buffer_size: int = _BUFFER_SIZE,
        timeout: Optional[float] = 5.0,
    ) -> None:
        self.sock = sock
        self.address = address
        self.buffer_size = buffer_size
        self.sock.settimeout(timeout)

    def _read_raw(self) -> bytes:
        chunks: list[bytes] = []
        try:
            while True:
                chunk = self.sock.recv(self.buffer_size)
                if not chunk:
                    break
                chunks.append(chunk)
                if len(chunk) != self.buffer_size:
                    break
        except socket.timeout:
            pass
        return b"".join(chunks)

    def read_request(self) -> Optional[HttpRequest]:
        """Read and parse the request.

        A request that cannot be parsed is answered with 400 Bad Request;
        None is returned then and when nothing could be read.
        """
        get_logger().trace("Reading data from socket")
        try:
            data = self._read_raw()
        except OSError as exc:
            get_logger().error("Error occurred while reading data from socket: {}", exc)
            self.close()
            return None
        if not data:
            self.close()
            return None
        try:
            request = HttpRequest.parse(data)
        except ValueError as exc:
            get_logger().error("Invalid request: {}", exc)
            with contextlib.suppress(OSError):
                HttpResponse(HttpCode.BAD_REQUEST, connection=self).send()
            return None
        request.connection = self
        return request

    def respond(self, response: Union[str, bytes]) -> None:
        """Send ``response`` and close the socket."""
        payload = (
            response if isinstance(response, bytes)
            else response.encode("utf-8", "surrogateescape")
        )
        try:
            self.sock.sendall(payload)
        finally:
            self.close()

    def close(self) -> None:
        with contextlib.suppress(OSError):
            self.sock.close()


class HttpServer:
    """Accepts connections on a background thread and queues their requests.

    At most ``max_connections`` parsed requests wait in the queue; accepting
    pauses while it is full.
    """

    def __init__(self, port: int = 8080, max_connections: int = 10, host: str = "0.0.0.0") -> None:
        self.host = host
        self.port = port
        self.max_connections = max_connections
        self._requests: "queue.Queue[HttpRequest]" = queue.Queue(maxsize=max(max_connections, 0))
        self._listener: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stopping = threading.Event()

    @property
    def address(self) -> tuple[str, int]:
        """The bound host and port; the real port once started with port 0."""
        if self._listener is None:
            return self.host, self.port
        host, port = self._listener.getsockname()[:2]
        return host, port

    def start(self) -> None:
        """Bind the listening socket and start accepting connections."""
        if self._thread is not None:
            raise RuntimeError("server already started")
        listener = socket.create_server((self.host, self.port))
        listener.settimeout(_POLL_INTERVAL)
        self._listener = listener
        self._stopping.clear()
        self._thread = threading.Thread(target=self._serve, name="winter-http", daemon=True)
        self._thread.start()
        get_logger().info("Server Started!")

    def _serve(self) -> None:
        listener = self._listener
        while not self._stopping.is_set():
            try:
                sock, address = listener.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stopping.is_set():
                    break
                get_logger().error("New connection ERROR: {}", exc)
                continue
            get_logger().trace("New Connection: {}", address[0] if address else "")
            request = HttpConnection(sock, address).read_request()
            if request is not None:
                self._enqueue(request)

    def _enqueue(self, request: HttpRequest) -> None:
        while not self._stopping.is_set():
            try:
                self._requests.put(request, timeout=_POLL_INTERVAL)
                return
            except queue.Full:
                continue

    def next_request(self, timeout: Optional[float] = None) -> Optional[HttpRequest]:
        """Return the next queued request, or None if none arrives within ``timeout``."""
        try:
            return self._requests.get(timeout=timeout)
        except queue.Empty:
            return None

    def stop(self) -> None:
        """Stop accepting connections and release the listening socket."""
        self._stopping.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._listener is not None:
            with contextlib.suppress(OSError):
                self._listener.close()
            self._listener = None
        get_logger().info("Server Stopped!")

    def __enter__(self) -> "HttpServer":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()