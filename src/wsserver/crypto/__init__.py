"""
=============================================================================
HANDSHAKE CRYPTOGRAPHY
=============================================================================

The two transforms behind Sec-WebSocket-Accept, written from scratch:

    sha1.py       streaming SHA-1 (SHA1Context, sha1)
    encoding.py   Base64 encoder (encode)

    accept = encode(sha1(key + GUID))

=============================================================================
"""

from .sha1 import SHA1Context, sha1
from .encoding import encode

__all__ = [
    "SHA1Context",
    "sha1",
    "encode",
]
