"""
=============================================================================
BASE64 ENCODER (RFC 4648 §4)
=============================================================================

Turns the 20-byte SHA-1 digest into the printable Sec-WebSocket-Accept
token.

    input   │      0x66 'f'     │      0x6F 'o'     │      0x6F 'o'     │
    bits    │ 0 1 1 0 0 1 1 0   │ 0 1 1 0 1 1 1 1   │ 0 1 1 0 1 1 1 1   │
    groups  │ 011001 │ 100110 │ 111101 │ 101111 │
    index   │   25   │   38   │   61   │   47   │
    output  │   Z    │   m    │   9    │   v    │

A trailing 1-byte group produces 2 symbols + "==", a trailing 2-byte
group 3 symbols + "=". A 20-byte digest therefore always encodes to 28
characters ending in a single "=".
"""

from typing import Union


ALPHABET = b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PAD = ord("=")

_SIX_BITS = 0x3F


def encode(data: Union[bytes, bytearray, memoryview]) -> bytes:
    """
    Base64-encode `data` with the standard alphabet and "=" padding.

    Examples:
        encode(b"")       → b""
        encode(b"f")      → b"Zg=="
        encode(b"fo")     → b"Zm8="
        encode(b"foobar") → b"Zm9vYmFy"
    """
    data = bytes(data)
    output = bytearray()

    for start in range(0, len(data), 3):
        chunk = data[start:start + 3]

        # Pack up to 24 bits, left aligned
        word = int.from_bytes(chunk.ljust(3, b"\x00"), "big")

        output.append(ALPHABET[(word >> 18) & _SIX_BITS])
        output.append(ALPHABET[(word >> 12) & _SIX_BITS])

        if len(chunk) == 1:
            output.append(PAD)
            output.append(PAD)
        elif len(chunk) == 2:
            output.append(ALPHABET[(word >> 6) & _SIX_BITS])
            output.append(PAD)
        else:
            output.append(ALPHABET[(word >> 6) & _SIX_BITS])
            output.append(ALPHABET[word & _SIX_BITS])

    return bytes(output)
