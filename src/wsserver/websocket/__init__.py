"""WebSocket opening handshake (data framing is not implemented)."""

from .handshake import (
    WEBSOCKET_GUID,
    WEBSOCKET_VERSION,
    accept_key,
    compose_handshake,
)

__all__ = [
    "WEBSOCKET_GUID",
    "WEBSOCKET_VERSION",
    "accept_key",
    "compose_handshake",
]
