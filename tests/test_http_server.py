import socket

import pytest

from winter.http_constants import HttpCode, HttpMethod, HttpVersion
from winter.http_response import HttpResponse
from winter.http_server import HttpConnection, HttpServer


def _recv_all(sock):
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def server():
    srv = HttpServer(port=0, max_connections=4, host="127.0.0.1")
    srv.start()
    yield srv
    srv.stop()


def test_request_round_trip_through_server(server):
    with socket.create_connection(server.address, timeout=5) as client:
        client.sendall(b"GET /home?id=7 HTTP/1.1\r\nHost: localhost\r\n\r\n")
        request = server.next_request(timeout=5)
        assert request.uri.path == "/home"
        assert request.query_parameters == {"id": "7"}
        HttpResponse(HttpCode.OK, connection=request.connection).send()
        reply = _recv_all(client)
    assert reply.startswith(b"HTTP/1.1 200 OK\n")


def test_next_request_times_out_when_empty(server):
    assert server.next_request(timeout=0.05) is None


def test_start_twice_raises(server):
    with pytest.raises(RuntimeError):
        server.start()


def test_context_manager_binds_real_port():
    with HttpServer(port=0, host="127.0.0.1") as srv:
        port = srv.address[1]
        assert port > 0
        with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
            client.sendall(b"DELETE /item HTTP/1.1\r\n\r\n")
            request = srv.next_request(timeout=5)
            assert request.method is HttpMethod.DELETE
            request.connection.respond("done")
            assert _recv_all(client) == b"done"


def test_connection_reads_in_chunks():
    client, server_side = socket.socketpair()
    with client:
        client.sendall(b"POST /data HTTP/1.0\nContent-Length: 5\n\nhello")
        connection = HttpConnection(server_side, buffer_size=8, timeout=1)
        request = connection.read_request()
        assert request.method is HttpMethod.POST
        assert request.http_version is HttpVersion.V1_0
        assert request.body == "hello"
        assert request.connection is connection
        connection.respond("reply")
        assert _recv_all(client) == b"reply"


def test_connection_answers_bad_request_for_garbage():
    client, server_side = socket.socketpair()
    with client:
        client.sendall(b"BOGUS / HTTP/1.1\r\n\r\n")
        connection = HttpConnection(server_side, timeout=1)
        assert connection.read_request() is None
        reply = _recv_all(client)
    assert reply.startswith(b"HTTP/1.1 400 Bad Request\n")


def test_connection_with_no_data_returns_none():
    client, server_side = socket.socketpair()
    client.close()
    connection = HttpConnection(server_side, timeout=1)
    assert connection.read_request() is None