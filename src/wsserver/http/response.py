"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds and serializes the three kinds of response this server sends.

    ┌─ 101 UPGRADE ───────────────────────────────────────────────────────┐
    │  HTTP/1.1 101 Switching Protocols\r\n                               │
    │  Upgrade: websocket\r\n                                             │
    │  Connection: Upgrade\r\n                                            │
    │  Sec-WebSocket-Accept: s3pPLMBiTxaQ9kYGzzhZRbK+xOo=\r\n             │
    │  \r\n                                      (nothing else, no body)  │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─ 200 CONTENT ───────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                                                │
    │  Content-Type: text/html;charset=utf-8\r\n                          │
    │  Content-Length: 1532\r\n                  ← auto-added             │
    │  Date: Sat, 17 Oct 2026 12:00:00 GMT\r\n   ← auto-added             │
    │  Server: wsserver/1.0\r\n                  ← auto-added             │
    │  \r\n                                                               │
    │  <!DOCTYPE html>...                                                 │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─ 4xx / 5xx ERROR ───────────────────────────────────────────────────┐
    │  HTTP/1.1 400 Bad Request\r\n                                       │
    │  Content-Type: text/plain; charset=utf-8\r\n                        │
    │  Connection: close\r\n                                              │
    │  ...                                                                │
    │  \r\n                                                               │
    │  Bad Request                                                        │
    └─────────────────────────────────────────────────────────────────────┘

A 1xx response must not carry Content-Length (RFC 7230 §3.3.2), so the
automatic headers are only added to final (non-1xx) responses.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Union

from .request import HTTPError
from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "wsserver/1.0"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Attributes:
        status:  HTTPStatus of the response.
        headers: Header name → value, written in insertion order.
        body:    Raw body bytes.
        version: Protocol version for the status line.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 101 Switching Protocols"."""
        return f"{self.version} {self.status.value} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize for socket.sendall().

        Args:
            server_name: Value of the Server header on final responses.
        """
        response_headers = dict(self.headers)

        if not self.status.is_informational:
            response_headers.setdefault("Content-Length", str(len(self.body)))
            response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
            response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")

        # Empty line between headers and body
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("ascii") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .html("<h1>hello</h1>")
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the body. Strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        self.header("Content-Type", "text/plain; charset=utf-8")
        return self.body(text)

    def html(self, html: Union[str, bytes]) -> "ResponseBuilder":
        self.header("Content-Type", "text/html;charset=utf-8")
        return self.body(html)

    def close_connection(self) -> "ResponseBuilder":
        """Tell the client this connection will not be reused."""
        return self.header("Connection", "close")

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an RFC 7231 IMF-fixdate.

    Example: "Sat, 17 Oct 2026 12:00:00 GMT"
    """
    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def html_response(content: Union[str, bytes]) -> HTTPResponse:
    """200 OK with an HTML body."""
    return ResponseBuilder().status(HTTPStatus.OK).html(content).build()


def error_response(error: Union[HTTPError, HTTPStatus]) -> HTTPResponse:
    """
    Translate a parse/routing failure into a closing error response.

    The reason phrase doubles as the body:

        HTTPError.NOT_IMPLEMENTED → "HTTP/1.1 501 Not Implemented" ... "Not Implemented"
    """
    status = error.status if isinstance(error, HTTPError) else error
    return (ResponseBuilder()
        .status(status)
        .text(status.phrase)
        .close_connection()
        .build())
