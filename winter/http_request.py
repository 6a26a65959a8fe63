"""Parsing of raw HTTP/1.x request text into request objects."""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field
from typing import Any, Union

from winter.http_constants import URI, HttpMethod, HttpVersion
from winter.log import get_logger

_HEADER_END = re.compile(r"\r\n\r\n|\n\n")


def url_decode(text: str) -> str:
    """Decode %XX escapes in a request path."""
    return urllib.parse.unquote(text)


def _split_head(rest: str) -> tuple[str, str]:
    """Split what follows the request line into the header block and the body."""
    if rest.startswith("\r\n"):
        return "", rest[2:]
    if rest.startswith("\n"):
        return "", rest[1:]
    match = _HEADER_END.search(rest)
    if match is None:
        return rest, ""
    return rest[: match.start()], rest[match.end():]


def _parse_query(query: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in query.split("&"):
        name, sep, value = pair.partition("=")
        if sep:
            params[name] = value
    return params


def _parse_headers(block: str) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in block.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        name, sep, value = line.partition(":")
        if sep:
            headers[name] = value.strip()
    return headers


@dataclass
class HttpRequest:
    """A parsed HTTP request and the connection it arrived on."""

    method: HttpMethod = HttpMethod.GET
    uri: URI = field(default_factory=URI)
    http_version: HttpVersion = HttpVersion.V1_1
    headers: dict[str, str] = field(default_factory=dict)
    query_parameters: dict[str, str] = field(default_factory=dict)
    body: str = ""
    connection: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def parse(cls, data: Union[str, bytes]) -> "HttpRequest":
        """Parse a raw request; raise ValueError when it is malformed."""
        if isinstance(data, bytes):
            data = data.decode("utf-8", "surrogateescape")

        line_end = data.find("\n")
        if line_end < 0:
            raise ValueError("request line is not terminated")
        request_line = data[:line_end]
        header_block, body = _split_head(data[line_end + 1:])

        get_logger().trace("Request Line: {}", request_line)
        method_text, sep, remainder = request_line.partition(" ")
        if not sep:
            raise ValueError(f"malformed request line: {request_line!r}")
        target, sep, version_text = remainder.partition(" ")
        if not sep:
            raise ValueError(f"malformed request line: {request_line!r}")

        method = HttpMethod.from_string(method_text)
        path, question, query = target.rpartition("?")
        if not question:
            path, query = target, ""
        version = HttpVersion.from_string(version_text.rstrip())

        request = cls(
            method=method,
            uri=URI(url_decode(path)),
            http_version=version,
            headers=_parse_headers(header_block),
            query_parameters=_parse_query(query) if question else {},
            body=body,
        )
        get_logger().trace("Successfully parsed http request!")
        return request