"""Matching requests to registered endpoints and answering them on worker threads."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from winter.http_constants import HttpCode, HttpMethod
from winter.http_request import HttpRequest
from winter.http_response import HttpResponse
from winter.log import get_logger

Handler = Callable[[HttpRequest], HttpResponse]


@dataclass(frozen=True)
class Endpoint:
    """A path and method served by a handler."""

    uri: str
    method: HttpMethod
    handler: Handler


class Router:
    """Holds the endpoints and answers requests on a pool of worker threads.

    The first endpoint whose path equals the request path decides the
    outcome: its handler runs when the method matches, otherwise the answer
    is 405. A path no endpoint serves is answered with 404.
    """

    def __init__(self, workers: int = 4) -> None:
        self.endpoints: list[Endpoint] = []
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="winter-router")

    def register_endpoint(self, uri: str, method: HttpMethod, handler: Handler) -> Endpoint:
        """Serve ``method`` requests for ``uri`` with ``handler``."""
        endpoint = Endpoint(uri, method, handler)
        get_logger().trace("Registered endpoint {} {}", method.value, uri)
        self.endpoints.append(endpoint)
        return endpoint

    def _match(self, request: HttpRequest) -> Union[Endpoint, HttpCode]:
        for endpoint in self.endpoints:
            if endpoint.uri == request.uri.path:
                if endpoint.method is request.method:
                    return endpoint
                return HttpCode.METHOD_NOT_ALLOWED
        return HttpCode.NOT_FOUND

    def dispatch(self, request: HttpRequest) -> HttpResponse:
        """Return the response for ``request`` on the calling thread."""
        match = self._match(request)
        if isinstance(match, HttpCode):
            return HttpResponse(match)
        return match.handler(request)

    def route_request(self, request: HttpRequest) -> Optional["Future[None]"]:
        """Answer ``request`` on its connection.

        A matched request is handled on a worker thread and the future of
        that work is returned; 404 and 405 are sent at once and None is
        returned. A handler that raises is answered with 500.
        """
        match = self._match(request)
        if isinstance(match, HttpCode):
            HttpResponse(match, connection=request.connection).send()
            return None
        return self._executor.submit(self._handle, match, request)

    @staticmethod
    def _handle(endpoint: Endpoint, request: HttpRequest) -> None:
        try:
            response = endpoint.handler(request)
        except Exception as exc:
            get_logger().error("Handler for {} failed: {}", endpoint.uri, exc)
            response = HttpResponse(HttpCode.INTERNAL_SERVER_ERROR)
        response.connection = request.connection
        response.send()

    def close(self) -> None:
        """Wait for running handlers and release the worker threads."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "Router":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()