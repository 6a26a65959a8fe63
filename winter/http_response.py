"""Building and sending HTTP responses."""

from __future__ import annotations

from email.utils import formatdate
from typing import Any, Optional

from winter.http_constants import HttpCode, HttpVersion
from winter.json_serializer import JsonSerializer
from winter.reflect import Reflect

BASE_HEADERS = {"Connection": "Closed", "Server": "WT/0.0.1"}

_serializer = JsonSerializer()


class HttpResponse:
    """A response with a status, headers and an optional JSON body."""

    def __init__(
        self,
        code: HttpCode = HttpCode.OK,
        data: Optional[Reflect] = None,
        *,
        connection: Any = None,
        date: Optional[str] = None,
    ) -> None:
        self.http_version = HttpVersion.V1_1
        self.code = code
        self.connection = connection
        self.headers: dict[str, str] = dict(BASE_HEADERS)
        self.headers["Date"] = date if date is not None else formatdate(usegmt=True)
        self.body = ""
        if data is not None:
            self.headers["Content-Type"] = "application/json"
            self.body = _serializer.serialize(data)

    def to_response_string(self) -> str:
        """The full response text: status line, headers, blank line and body."""
        status = f"{self.http_version.value} {self.code.code} {self.code.phrase}\n"
        headers = "".join(f"{name}: {value}\n" for name, value in self.headers.items())
        return status + headers + "\n" + self.body + "\n"

    def send(self) -> None:
        """Write the response to its connection, which then closes."""
        if self.connection is None:
            raise RuntimeError("response has no connection to send on")
        self.connection.respond(self.to_response_string())