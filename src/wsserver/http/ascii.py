"""
=============================================================================
ASCII BYTE SCANNER
=============================================================================

Line and token splitting over raw request bytes.

HTTP/1.1 framing (RFC 7230 §3) is line oriented:

    GET /chat HTTP/1.1\r\n          ← request line: three tokens, single SP
    Host: example.com\r\n           ← header lines
    Upgrade: websocket\r\n
    \r\n                            ← empty line ends the header section

Both helpers return slices of the input (no copying, no decoding). Text
is only decoded by the request parser, after it has checked that the
slice is pure ASCII.

=============================================================================
WHY NOT bytes.split(b"\\r\\n")?
=============================================================================

    1. A bare LF is NOT a line terminator here. "a\\nb\\r\\n" is one line.
    2. We need the unconsumed remainder to know whether the header
       section was terminated at all, or whether the buffer simply
       ran out (see request.parse_request).
    3. Splitting the whole buffer up front would also split the bytes
       after the header section, which do not belong to the request.

=============================================================================
"""

from typing import Optional, Tuple, Union


Ascii = Union[bytes, memoryview]

CARRIAGE_RETURN = 0x0D
LINE_FEED = 0x0A
SPACE = 0x20


def read_line(buffer: Ascii) -> Optional[Tuple[Ascii, Ascii]]:
    """
    Split off the first CRLF-terminated line.

    Args:
        buffer: Raw bytes, usually straight from the receive buffer.

    Returns:
        (line, rest) where line excludes the CR and rest starts after the
        LF, or None when the buffer holds no CRLF at all.

    Example:
        read_line(b"a\\r\\nb")   → (b"a", b"b")
        read_line(b"\\r\\n")     → (b"", b"")
        read_line(b"partial")   → None
    """
    cr_found = False

    for index, byte in enumerate(buffer):
        if byte == CARRIAGE_RETURN:
            cr_found = True
        elif cr_found and byte == LINE_FEED:
            return buffer[:index - 1], buffer[index + 1:]
        else:
            cr_found = False

    return None


def read_token(buffer: Ascii) -> Tuple[Ascii, Ascii]:
    """
    Split off everything before the first space.

    Only a single 0x20 byte delimits. Tabs are ordinary token bytes and
    consecutive spaces produce empty tokens, which callers must reject.

    Returns:
        (token, rest). Without a space the whole buffer is the token and
        rest is empty.
    """
    for index, byte in enumerate(buffer):
        if byte == SPACE:
            return buffer[:index], buffer[index + 1:]

    return buffer, b""
