"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

    raw bytes ──► ascii.read_line / read_token
                        │
                        ▼
                  request.parse_request ──► Request | HTTPError | INCOMPLETE
                        │
                        ▼
                  routes.RouteTable.lookup
                        │
                        ▼
                  response.HTTPResponse.to_bytes ──► raw bytes

Nothing in this package touches a socket.
"""

from .ascii import read_line, read_token
from .request import INCOMPLETE, HTTPError, ParseState, Request, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    error_response,
    format_http_date,
    html_response,
)
from .routes import RouteTable
from .status_codes import HTTPStatus

__all__ = [
    "read_line",
    "read_token",
    "INCOMPLETE",
    "HTTPError",
    "ParseState",
    "Request",
    "parse_request",
    "HTTPResponse",
    "ResponseBuilder",
    "error_response",
    "format_http_date",
    "html_response",
    "RouteTable",
    "HTTPStatus",
]
