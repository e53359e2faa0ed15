"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into a structured Request, strictly
following RFC 7230 framing.

=============================================================================
WHAT THIS SERVER ACCEPTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    GET /chat HTTP/1.1\r\n                 ← exactly 3 tokens, 1 SP  │
    │    ─┬─ ──┬── ────┬───                                                │
    │     │    │       └── must be "HTTP/1.1"   else 505                  │
    │     │    └── target, any non-empty token                            │
    │     └── must be "GET"                     else 501                  │
    │                                                                      │
    │    Host: server.example.com\r\n           ← name ":" OWS value OWS  │
    │    Upgrade: websocket\r\n                                           │
    │    Connection: Upgrade\r\n                                          │
    │    Sec-WebSocket-Key: dGhlIHNhbXBsZSBub25jZQ==\r\n                  │
    │    Sec-WebSocket-Version: 13\r\n                                    │
    │    \r\n                                   ← end of headers          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Everything else is 400 Bad Request:
    - no CRLF at all, or no empty line ending the headers
    - non-ASCII bytes in any line
    - tabs or double spaces in the request line (no lenient splitting)
    - a header line without a colon, with an empty name, or with
      whitespace anywhere in the name ("Host : x", "Bad Name: x",
      a leading tab)

=============================================================================
ERRORS ARE VALUES
=============================================================================

parse_request() never raises for bad input. It returns one of:

    Request                 parsed and validated
    HTTPError.<KIND>        what went wrong, and which status to send
    INCOMPLETE              only with complete=False: the buffer ends
                            before a required CRLF, read more bytes

Without complete=False a truncated request is indistinguishable from a
malformed one and is reported as BAD_REQUEST.

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP PARSING
=============================================================================

Q: "How do you know when the HTTP headers end?"
A: "An empty line, i.e. CRLF immediately followed by CRLF. If the buffer
   runs out first, either more bytes are coming or the request is bad;
   the caller tells the parser which with the `complete` flag."

Q: "What if a header appears twice?"
A: "Last one wins. That's a deliberate choice for this server; RFC 7230
   would allow combining list-valued headers with commas instead."

=============================================================================
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .ascii import Ascii, read_line, read_token
from .status_codes import HTTPStatus


class HTTPError(Enum):
    """
    Closed set of request failures.

    Each kind maps to the status code the caller should send back. These
    are returned, not raised.
    """

    BAD_REQUEST = HTTPStatus.BAD_REQUEST
    NOT_IMPLEMENTED = HTTPStatus.NOT_IMPLEMENTED
    VERSION_NOT_SUPPORTED = HTTPStatus.HTTP_VERSION_NOT_SUPPORTED
    NOT_FOUND = HTTPStatus.NOT_FOUND         # routing layer only

    @property
    def status(self) -> HTTPStatus:
        return self.value


class ParseState(Enum):
    """Parser signals that are not errors."""

    INCOMPLETE = "incomplete"


INCOMPLETE = ParseState.INCOMPLETE


SUPPORTED_METHOD = "GET"
SUPPORTED_VERSION = "HTTP/1.1"

_WHITESPACE = re.compile(r"\s")


@dataclass(frozen=True)
class Request:
    """
    A parsed, validated HTTP request.

    Attributes:
        method:       Always "GET" once validated.
        target:       Request target as sent ("/", "/chat?room=1").
        http_version: Always "HTTP/1.1" once validated.
        headers:      Lowercase header name → trimmed value (read-only).

    Instances are created by parse_request() and never modified. The
    headers are copied into a read-only mapping, so neither the caller's
    dict nor request.headers can change an existing Request.
    """

    method: str
    target: str
    http_version: str = SUPPORTED_VERSION
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def __hash__(self) -> int:
        return hash((self.method, self.target, self.http_version, frozenset(self.headers.items())))

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    @property
    def connection_tokens(self) -> List[str]:
        """
        The Connection header as a list of lowercase options.

            "keep-alive, Upgrade" → ["keep-alive", "upgrade"]
        """
        value = self.headers.get("connection", "")
        return [token.strip().lower() for token in value.split(",") if token.strip()]

    @property
    def is_websocket(self) -> bool:
        """
        Whether this request asks to switch to the WebSocket protocol.

        True iff:
            - the method is GET
            - Connection lists the "upgrade" option
            - Upgrade is "websocket" (any case)

        Missing headers simply make this False.
        """
        if self.method != SUPPORTED_METHOD:
            return False

        if "upgrade" not in self.connection_tokens:
            return False

        return self.headers.get("upgrade", "").lower() == "websocket"


ParseResult = Union[Request, HTTPError, ParseState]


def parse_request(
    buffer: Union[bytes, bytearray, memoryview],
    complete: bool = True,
) -> ParseResult:
    """
    Parse a request line and header section.

    =========================================================================
    PARSING ALGORITHM
    =========================================================================

    1. read_line → request line            (no CRLF → missing)
    2. ASCII check                         (→ BAD_REQUEST)
    3. three tokens on single spaces       (→ BAD_REQUEST)
    4. method == GET                       (→ NOT_IMPLEMENTED)
    5. version == HTTP/1.1                 (→ VERSION_NOT_SUPPORTED)
    6. read_line until the empty line      (runs out → missing)
    7. split each header on its first ":"  (→ BAD_REQUEST)

    "missing" is BAD_REQUEST, or INCOMPLETE when complete=False.

    =========================================================================

    Args:
        buffer:   Bytes received so far. Anything after the empty line
                  is ignored.
        complete: False while the caller may still receive more bytes
                  for this request.

    Returns:
        Request, HTTPError or INCOMPLETE.
    """
    missing = HTTPError.BAD_REQUEST if complete else INCOMPLETE

    split = read_line(memoryview(buffer))
    if split is None:
        return missing

    line, rest = split

    request_line = _parse_request_line(line)
    if isinstance(request_line, HTTPError):
        return request_line

    method, target, version = request_line

    headers = _parse_headers(rest, missing)
    if not isinstance(headers, dict):
        return headers

    return Request(
        method=method,
        target=target,
        http_version=version,
        headers=headers,
    )


def _decode_ascii(line: Ascii) -> Optional[str]:
    """Decode a line that must be pure ASCII, or None if it isn't."""
    try:
        return str(line, "ascii")
    except UnicodeDecodeError:
        return None


def _parse_request_line(line: Ascii) -> Union[Tuple[str, str, str], HTTPError]:
    """
    Split and validate "METHOD SP TARGET SP VERSION".

    The three read_token() calls plus the length check accept exactly two
    single spaces: a fourth token or a trailing space leaves bytes that
    are not accounted for.
    """
    if _decode_ascii(line) is None:
        return HTTPError.BAD_REQUEST

    method, rest = read_token(line)
    target, rest = read_token(rest)
    version, rest = read_token(rest)

    if not (method and target and version):
        return HTTPError.BAD_REQUEST

    if len(method) + len(target) + len(version) + 2 != len(line):
        return HTTPError.BAD_REQUEST

    method, target, version = str(method, "ascii"), str(target, "ascii"), str(version, "ascii")

    # Method first: "PROPFIND / HTTP/1.0" is 501, not 505
    if method != SUPPORTED_METHOD:
        return HTTPError.NOT_IMPLEMENTED

    if version != SUPPORTED_VERSION:
        return HTTPError.VERSION_NOT_SUPPORTED

    return method, target, version


def _parse_headers(
    buffer: Ascii,
    missing: Union[HTTPError, ParseState],
) -> Union[Dict[str, str], HTTPError, ParseState]:
    """
    Parse header lines up to and including the empty line.

    Each line is split on its first colon:

        "Sec-WebSocket-Key: abc==" → ("sec-websocket-key", "abc==")
        "X-Time: 12:30:00"         → ("x-time", "12:30:00")
    """
    headers: Dict[str, str] = {}
    rest = buffer

    while True:
        split = read_line(rest)
        if split is None:
            return missing

        line, rest = split
        if not line:
            return headers

        text = _decode_ascii(line)
        if text is None:
            return HTTPError.BAD_REQUEST

        name, colon, value = text.partition(":")
        if not colon or not name or _WHITESPACE.search(name):
            return HTTPError.BAD_REQUEST

        headers[name.lower()] = value.strip()
