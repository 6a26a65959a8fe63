from datetime import timedelta
from email.utils import parsedate_to_datetime

import pytest

from winter.http_constants import HttpCode
from winter.http_response import HttpResponse
from winter.json_serializer import JsonSerializer
from winter.reflect import Field, Reflect

DATE = "Mon, 01 Jan 2024 00:00:00 GMT"


class _ResponsePayload(Reflect):
    code = Field("int")
    message = Field("string")


class _RecordingConnection:
    def __init__(self):
        self.sent = []

    def respond(self, text):
        self.sent.append(text)


def test_response_without_body():
    response = HttpResponse(HttpCode.NOT_FOUND, date=DATE)
    assert response.to_response_string() == (
        "HTTP/1.1 404 Not found\n"
        "Connection: Closed\n"
        "Server: WT/0.0.1\n"
        f"Date: {DATE}\n"
        "\n"
        "\n"
    )


def test_status_line_for_ok():
    response = HttpResponse(date=DATE)
    assert response.to_response_string().startswith("HTTP/1.1 200 OK\n")


def test_json_body_and_content_type():
    payload = _ResponsePayload(code=0, message="OK")
    response = HttpResponse(HttpCode.OK, payload, date=DATE)
    assert response.headers["Content-Type"] == "application/json"
    assert response.body == JsonSerializer().serialize(payload)
    assert response.body == '{\n"code":0,\n"message":"OK"\n}'
    assert response.to_response_string().endswith("\n\n" + response.body + "\n")


def test_default_date_is_http_date_in_gmt():
    response = HttpResponse()
    parsed = parsedate_to_datetime(response.headers["Date"])
    assert parsed.utcoffset() == timedelta(0)


def test_base_headers_are_not_shared():
    first = HttpResponse(date=DATE)
    first.headers["Server"] = "changed"
    second = HttpResponse(date=DATE)
    assert second.headers["Server"] == "WT/0.0.1"


def test_send_writes_to_connection():
    connection = _RecordingConnection()
    response = HttpResponse(HttpCode.METHOD_NOT_ALLOWED, connection=connection, date=DATE)
    response.send()
    assert connection.sent == [response.to_response_string()]
    assert connection.sent[0].startswith("HTTP/1.1 405 Method not allowed\n")


def test_send_without_connection_raises():
    with pytest.raises(RuntimeError):
        HttpResponse(date=DATE).send()