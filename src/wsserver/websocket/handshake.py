"""
=============================================================================
WEBSOCKET OPENING HANDSHAKE (RFC 6455 §4.2)
=============================================================================

Turns an HTTP Upgrade request into a 101 Switching Protocols response.

    CLIENT                                              SERVER
      │  GET /chat HTTP/1.1                               │
      │  Upgrade: websocket                               │
      │  Connection: Upgrade                              │
      │  Sec-WebSocket-Key: dGhlIHNhbXBsZSBub25jZQ==      │
      │  Sec-WebSocket-Version: 13                        │
      │ ────────────────────────────────────────────────► │
      │                                                   │
      │                  HTTP/1.1 101 Switching Protocols │
      │                               Upgrade: websocket  │
      │                              Connection: Upgrade  │
      │   Sec-WebSocket-Accept: s3pPLMBiTxaQ9kYGzzhZRbK+xOo=
      │ ◄──────────────────────────────────────────────── │

=============================================================================
THE ACCEPT KEY
=============================================================================

    key + "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"
         │
         ▼  SHA-1          (crypto.sha1.SHA1Context)
    20 raw bytes
         │
         ▼  Base64         (crypto.encoding.encode)
    "s3pPLMBiTxaQ9kYGzzhZRbK+xOo="

The GUID is fixed by the RFC; a client that receives any other value
aborts the connection. It proves the server really speaks WebSocket
rather than being an HTTP server that echoed headers back.

=============================================================================
"""

import logging
from typing import Union

from ..crypto.encoding import encode
from ..crypto.sha1 import SHA1Context
from ..http.request import HTTPError, Request
from ..http.response import HTTPResponse
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


WEBSOCKET_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"
WEBSOCKET_VERSION = "13"


def accept_key(key: str) -> str:
    """
    Compute Sec-WebSocket-Accept for a client's Sec-WebSocket-Key.

        >>> accept_key("dGhlIHNhbXBsZSBub25jZQ==")
        's3pPLMBiTxaQ9kYGzzhZRbK+xOo='
    """
    context = SHA1Context()
    context.add((key + WEBSOCKET_GUID).encode("ascii"))
    return encode(context.digest()).decode("ascii")


def compose_handshake(request: Request) -> Union[HTTPResponse, HTTPError]:
    """
    Build the 101 response for a WebSocket upgrade request.

    The caller has already checked request.is_websocket. This function
    only validates the handshake-specific headers:

        sec-websocket-version  must be exactly "13"   else BAD_REQUEST
        sec-websocket-key      must be present        else BAD_REQUEST

    Returns:
        HTTPResponse (101) or HTTPError.BAD_REQUEST.
    """
    version = request.headers.get("sec-websocket-version")
    if version != WEBSOCKET_VERSION:
        logger.debug(f"Rejecting handshake: unsupported Sec-WebSocket-Version {version!r}")
        return HTTPError.BAD_REQUEST

    key = request.headers.get("sec-websocket-key")
    if key is None:
        logger.debug("Rejecting handshake: missing Sec-WebSocket-Key")
        return HTTPError.BAD_REQUEST

    return HTTPResponse(
        status=HTTPStatus.SWITCHING_PROTOCOLS,
        headers={
            "Upgrade": "websocket",
            "Connection": "Upgrade",
            "Sec-WebSocket-Accept": accept_key(key),
        },
    )
