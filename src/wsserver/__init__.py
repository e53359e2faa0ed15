"""
=============================================================================
WSSERVER: HTTP/1.1 + WEBSOCKET HANDSHAKE FROM SCRATCH
=============================================================================

A minimal HTTP/1.1 server that serves a few static pages and answers
WebSocket upgrade requests with a correct 101 Switching Protocols
response.

Everything on the wire path is written by hand:

    http.ascii          line / token scanner over raw bytes
    http.request        strict request-line and header parser
    crypto.sha1         SHA-1 (FIPS 180-1)
    crypto.encoding     Base64 (RFC 4648)
    websocket.handshake Sec-WebSocket-Accept and the 101 response

Quick start:

    python -m wsserver --port 4485
    # then open http://localhost:4485/

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .http import HTTPError, HTTPResponse, HTTPStatus, Request, RouteTable, parse_request
from .websocket import accept_key, compose_handshake

__all__ = [
    "__version__",
    "ServerConfig",
    "HTTPServer",
    "HTTPError",
    "HTTPResponse",
    "HTTPStatus",
    "Request",
    "RouteTable",
    "parse_request",
    "accept_key",
    "compose_handshake",
]
