"""
Unit tests for Connection, using a local socket pair.
"""

import socket

import pytest

from wsserver.core.connection import Connection, ConnectionState


@pytest.fixture
def socket_pair():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    client_side.close()
    server_side.close()


def make_connection(sock, **kwargs) -> Connection:
    kwargs.setdefault("timeout", 2.0)
    return Connection(socket=sock, address=("127.0.0.1", 50000), **kwargs)


class TestFill:

    def test_fill_receives_bytes(self, socket_pair):
        server_side, client_side = socket_pair
        conn = make_connection(server_side)

        client_side.sendall(b"GET / HTTP/1.1\r\n")

        assert conn.fill() is True
        assert bytes(conn.buffer) == b"GET / HTTP/1.1\r\n"
        assert conn.bytes_received == 16

    def test_fill_accumulates(self, socket_pair):
        server_side, client_side = socket_pair
        conn = make_connection(server_side)

        client_side.sendall(b"GET / ")
        conn.fill()
        client_side.sendall(b"HTTP/1.1")
        conn.fill()

        assert bytes(conn.buffer) == b"GET / HTTP/1.1"

    def test_fill_reports_peer_close(self, socket_pair):
        server_side, client_side = socket_pair
        conn = make_connection(server_side)

        client_side.sendall(b"abc")
        client_side.shutdown(socket.SHUT_WR)

        assert conn.fill() is True
        assert conn.fill() is False
        assert bytes(conn.buffer) == b"abc"

    def test_fill_stops_at_capacity(self, socket_pair):
        server_side, client_side = socket_pair
        conn = make_connection(server_side, buffer_size=4, max_request_size=6)

        client_side.sendall(b"0123456789")

        assert conn.fill() is True       # 4 bytes
        assert conn.fill() is False      # 2 more, now full
        assert conn.fill() is False
        assert bytes(conn.buffer) == b"012345"

    def test_fill_times_out(self, socket_pair):
        server_side, _ = socket_pair
        conn = make_connection(server_side, timeout=0.1)

        with pytest.raises(socket.timeout):
            conn.fill()


class TestSendAndClose:

    def test_send(self, socket_pair):
        server_side, client_side = socket_pair
        conn = make_connection(server_side)

        assert conn.send(b"HTTP/1.1 200 OK\r\n\r\n") is True
        assert client_side.recv(100) == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_close_is_idempotent(self, socket_pair):
        server_side, client_side = socket_pair
        conn = make_connection(server_side)
        client_side.shutdown(socket.SHUT_WR)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_context_manager_closes(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        with make_connection(server_side) as conn:
            conn.send(b"bye")

        assert conn.state == ConnectionState.CLOSED
        assert client_side.recv(10) == b"bye"
        assert client_side.recv(10) == b""

    def test_send_after_close_fails(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)
        conn = make_connection(server_side)
        conn.close()

        assert conn.send(b"late") is False

    def test_client_ip(self, socket_pair):
        server_side, _ = socket_pair

        assert make_connection(server_side).client_ip == "127.0.0.1"
