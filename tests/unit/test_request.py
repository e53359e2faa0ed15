"""
Unit tests for HTTP request parsing.
"""

import pytest

from wsserver.http.request import (
    INCOMPLETE,
    HTTPError,
    Request,
    parse_request,
)
from wsserver.http.status_codes import HTTPStatus


class TestParseRequest:
    """Tests for parse_request() on well-formed input."""

    def test_parse_upgrade_request(self, upgrade_request: bytes):
        request = parse_request(upgrade_request)

        assert isinstance(request, Request)
        assert request.method == "GET"
        assert request.target == "/chat"
        assert request.http_version == "HTTP/1.1"
        assert request.headers["host"] == "server.example.com"
        assert request.headers["sec-websocket-key"] == "dGhlIHNhbXBsZSBub25jZQ=="
        assert request.headers["sec-websocket-version"] == "13"

    def test_header_names_are_lowercased(self):
        request = parse_request(b"GET / HTTP/1.1\r\nX-Custom-HEADER: v\r\n\r\n")

        assert request.headers == {"x-custom-header": "v"}

    def test_values_are_trimmed(self):
        request = parse_request(b"GET / HTTP/1.1\r\nHost:    example.com   \r\n\r\n")

        assert request.headers["host"] == "example.com"

    def test_value_may_contain_colons(self):
        request = parse_request(b"GET / HTTP/1.1\r\nX-Time: 12:30:00\r\n\r\n")

        assert request.headers["x-time"] == "12:30:00"

    def test_empty_value_allowed(self):
        request = parse_request(b"GET / HTTP/1.1\r\nX-Empty:\r\n\r\n")

        assert request.headers["x-empty"] == ""

    def test_no_headers(self):
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request == Request(method="GET", target="/", headers={})

    def test_duplicate_header_last_wins(self):
        request = parse_request(b"GET / HTTP/1.1\r\nX-A: first\r\nx-a: second\r\n\r\n")

        assert request.headers["x-a"] == "second"

    def test_bytes_after_headers_ignored(self):
        request = parse_request(b"GET / HTTP/1.1\r\nHost: a\r\n\r\ngarbage \xff")

        assert isinstance(request, Request)
        assert request.headers == {"host": "a"}

    def test_target_kept_verbatim(self):
        request = parse_request(b"GET /chat?room=1&x=%20 HTTP/1.1\r\n\r\n")

        assert request.target == "/chat?room=1&x=%20"

    def test_accepts_memoryview(self, plain_request: bytes):
        assert isinstance(parse_request(memoryview(plain_request)), Request)


class TestParseErrors:
    """Malformed input is reported as a value, never raised."""

    @pytest.mark.parametrize("raw", [
        b"",
        b"GET / HTTP/1.1",
        b"GET / HTTP/1.1\r\nHost: x",
        b"GET / HTTP/1.1\r\nHost: x\r\n",
    ])
    def test_missing_crlf_is_bad_request(self, raw: bytes):
        assert parse_request(raw) is HTTPError.BAD_REQUEST

    @pytest.mark.parametrize("line", [
        b"GET /",
        b"GET",
        b"GET / HTTP/1.1 extra",
        b"GET  / HTTP/1.1",
        b"GET / HTTP/1.1 ",
        b" GET / HTTP/1.1",
        b"GET\t/ HTTP/1.1",
    ])
    def test_wrong_token_count_is_bad_request(self, line: bytes):
        assert parse_request(line + b"\r\n\r\n") is HTTPError.BAD_REQUEST

    def test_non_ascii_request_line(self):
        assert parse_request(b"GET /caf\xc3\xa9 HTTP/1.1\r\n\r\n") is HTTPError.BAD_REQUEST

    def test_non_ascii_header(self):
        raw = b"GET / HTTP/1.1\r\nX-Name: caf\xc3\xa9\r\n\r\n"
        assert parse_request(raw) is HTTPError.BAD_REQUEST

    @pytest.mark.parametrize("header", [
        b"NoColon",
        b": no-name",
        b"Host : x",
        b"Bad Name: x",
        b"\tHost: x",
    ])
    def test_malformed_header_is_bad_request(self, header: bytes):
        raw = b"GET / HTTP/1.1\r\n" + header + b"\r\n\r\n"
        assert parse_request(raw) is HTTPError.BAD_REQUEST

    @pytest.mark.parametrize("method", [b"POST", b"PUT", b"HEAD", b"get"])
    def test_other_methods_not_implemented(self, method: bytes):
        raw = method + b" / HTTP/1.1\r\n\r\n"
        assert parse_request(raw) is HTTPError.NOT_IMPLEMENTED

    @pytest.mark.parametrize("version", [b"HTTP/1.0", b"HTTP/2", b"http/1.1"])
    def test_other_versions_not_supported(self, version: bytes):
        raw = b"GET / " + version + b"\r\n\r\n"
        assert parse_request(raw) is HTTPError.VERSION_NOT_SUPPORTED

    def test_method_checked_before_version(self):
        assert parse_request(b"POST / HTTP/1.0\r\n\r\n") is HTTPError.NOT_IMPLEMENTED

    def test_error_statuses(self):
        assert HTTPError.BAD_REQUEST.status == HTTPStatus.BAD_REQUEST
        assert HTTPError.NOT_IMPLEMENTED.status == 501
        assert HTTPError.VERSION_NOT_SUPPORTED.status == 505
        assert HTTPError.NOT_FOUND.status == 404


class TestIncomplete:
    """complete=False separates 'need more bytes' from 'malformed'."""

    @pytest.mark.parametrize("raw", [
        b"",
        b"GET / HTT",
        b"GET / HTTP/1.1\r\nHost: x",
        b"GET / HTTP/1.1\r\nHost: x\r\n",
    ])
    def test_truncated_is_incomplete(self, raw: bytes):
        assert parse_request(raw, complete=False) is INCOMPLETE

    def test_truncated_is_bad_request_when_complete(self):
        assert parse_request(b"GET / HTTP/1.1\r\nHost: x", complete=True) is HTTPError.BAD_REQUEST

    def test_errors_still_reported_early(self):
        assert parse_request(b"POST / HTTP/1.1\r\nHost", complete=False) is HTTPError.NOT_IMPLEMENTED

    def test_full_request_parses(self, upgrade_request: bytes):
        assert isinstance(parse_request(upgrade_request, complete=False), Request)


class TestRequest:
    """Tests for the Request value."""

    def test_get_header_case_insensitive(self, upgrade_request: bytes):
        request = parse_request(upgrade_request)

        assert request.get_header("Sec-WebSocket-Version") == "13"
        assert request.get_header("X-Missing") == ""
        assert request.get_header("X-Missing", "default") == "default"

    def test_connection_tokens(self):
        request = Request("GET", "/", headers={"connection": "keep-alive, Upgrade"})

        assert request.connection_tokens == ["keep-alive", "upgrade"]

    def test_is_websocket(self, upgrade_request: bytes):
        assert parse_request(upgrade_request).is_websocket is True

    def test_is_websocket_case_insensitive(self):
        request = Request("GET", "/", headers={"connection": "UPGRADE", "upgrade": "WebSocket"})

        assert request.is_websocket is True

    def test_plain_request_is_not_websocket(self, plain_request: bytes):
        assert parse_request(plain_request).is_websocket is False

    def test_upgrade_without_connection_option(self):
        request = Request("GET", "/", headers={"connection": "keep-alive", "upgrade": "websocket"})

        assert request.is_websocket is False

    def test_upgrade_to_other_protocol(self):
        request = Request("GET", "/", headers={"connection": "upgrade", "upgrade": "h2c"})

        assert request.is_websocket is False

    def test_request_is_frozen(self):
        request = Request("GET", "/")

        with pytest.raises(AttributeError):
            request.target = "/other"

    def test_headers_are_read_only(self):
        request = parse_request(
            b"GET / HTTP/1.1\r\nConnection: Upgrade\r\nUpgrade: h2c\r\n\r\n"
        )

        with pytest.raises(TypeError):
            request.headers["upgrade"] = "websocket"

        assert request.headers["upgrade"] == "h2c"
        assert request.is_websocket is False

    def test_source_dict_changes_do_not_leak(self):
        headers = {"upgrade": "h2c"}
        request = Request("GET", "/", headers=headers)
        headers["upgrade"] = "websocket"

        assert request.headers["upgrade"] == "h2c"

    def test_request_is_hashable(self):
        first = Request("GET", "/", headers={"host": "a"})
        second = Request("GET", "/", headers={"host": "a"})

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1
