"""HTTP status codes, versions, methods and request URIs."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class HttpCode(enum.Enum):
    """Response status codes with their reason phrases."""

    OK = (200, "OK")
    BAD_REQUEST = (400, "Bad Request")
    NOT_FOUND = (404, "Not found")
    METHOD_NOT_ALLOWED = (405, "Method not allowed")
    INTERNAL_SERVER_ERROR = (500, "Internal server error")

    def __init__(self, code: int, phrase: str) -> None:
        self.code = code
        self.phrase = phrase


class HttpVersion(enum.Enum):
    """Supported protocol versions."""

    V1_0 = "HTTP/1.0"
    V1_1 = "HTTP/1.1"
    V2_0 = "HTTP/2.0"

    @classmethod
    def from_string(cls, text: str) -> "HttpVersion":
        """Return the version that ``text`` starts with; raise ValueError otherwise."""
        for version in cls:
            if text.startswith(version.value):
                return version
        raise ValueError(f"Invalid HttpVersion: {text}")


class HttpMethod(enum.Enum):
    """Request methods."""

    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    PUT = "PUT"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"

    @classmethod
    def from_string(cls, text: str) -> "HttpMethod":
        """Return the method that ``text`` starts with; raise ValueError otherwise."""
        for method in cls:
            if text.startswith(method.value):
                return method
        raise ValueError(f"Invalid HttpMethod: {text}")


@dataclass(frozen=True)
class URI:
    """A request target path."""

    value: str = ""

    @property
    def path(self) -> str:
        return self.value

    @property
    def full_path(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value