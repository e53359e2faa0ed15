"""
=============================================================================
HTTP STATUS CODES (RFC 7231)
=============================================================================

The status codes this server can put on the wire.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  1xx   │ 101 Switching Protocols  - WebSocket upgrade accepted     │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  2xx   │ 200 OK                   - Route found, content served    │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request          - Malformed request / handshake  │
    │        │ 404 Not Found            - No route for the target        │
    │        │ 408 Request Timeout      - Client too slow to send        │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error                                  │
    │        │ 501 Not Implemented      - Method other than GET          │
    │        │ 503 Service Unavailable  - Worker queue full              │
    │        │ 505 HTTP Version Not Supported - Anything but HTTP/1.1    │
    └────────┴───────────────────────────────────────────────────────────┘

Q: "Why is 501 used for an unknown method instead of 405?"
A: "405 means the server knows the method but the resource doesn't allow
   it. This server only implements GET at all, so any other method is
   'not implemented' (RFC 7231 §6.6.2)."

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    SWITCHING_PROTOCOLS = 101    # WebSocket upgrade

    OK = 200

    BAD_REQUEST = 400
    NOT_FOUND = 404
    REQUEST_TIMEOUT = 408

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      └── phrase
                      └── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_informational(self) -> bool:
        """1xx responses carry no body and no Content-Length."""
        return 100 <= self < 200

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.SWITCHING_PROTOCOLS: "Switching Protocols",
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
