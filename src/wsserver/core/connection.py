"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket together with its receive buffer.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

A handshake request sent in one write may arrive in several recv() calls:

    First recv():  b"GET /chat HTTP/1.1\\r\\nHost: exa"
    Second recv(): b"mple.com\\r\\nUpgrade: websocket\\r\\n ... \\r\\n\\r\\n"

So the connection accumulates bytes in a BoundedBuffer and the server
re-runs the parser after every fill() until it stops answering
INCOMPLETE. The buffer never grows past max_request_size; a client that
keeps sending without ending its headers simply fills it up, and the
parser then reports BAD_REQUEST.

    ┌──────────────────── max_request_size ────────────────────┐
    │ GET /chat HTTP/1.1\r\nHost: ...        │ (free)           │
    └────────────────────────────────────────┴──────────────────┘
         ▲ fill() #1 (≤ buffer_size) ▲ fill() #2

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING ──────► CLOSING ──────► CLOSED

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..buffer import BoundedBuffer


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""

    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Receiving request bytes
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Bytes requested per recv() call.
        timeout: Socket timeout in seconds (None = blocking).
        max_request_size: Capacity of the receive buffer.
    """

    socket: socket.socket
    address: tuple
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    buffer_size: int = 1024
    timeout: Optional[float] = 30.0
    max_request_size: int = 8192

    _buffer: BoundedBuffer = field(init=False, repr=False)

    def __post_init__(self):
        self._buffer = BoundedBuffer(self.max_request_size)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def buffer(self) -> memoryview:
        """Read-only view of every byte received so far."""
        return self._buffer.view()

    @property
    def bytes_received(self) -> int:
        return len(self._buffer)

    def fill(self) -> bool:
        """
        Receive one chunk into the buffer.

        At most buffer_size bytes are requested, and never more than the
        buffer has room for.

        Returns:
            True if more bytes may still arrive, False once the peer has
            closed its side or the buffer is full.

        Raises:
            socket.timeout: The client sent nothing within `timeout`.
        """
        self.state = ConnectionState.READING

        if self._buffer.is_full:
            return False

        try:
            chunk = self.socket.recv(min(self.buffer_size, self._buffer.remaining))
        except (ConnectionResetError, BrokenPipeError):
            chunk = b""

        if not chunk:
            logger.debug(f"[{self.id}] Peer closed after {self.bytes_received} bytes")
            return False

        self._buffer.write(chunk)
        return not self._buffer.is_full

    def send(self, data: bytes) -> bool:
        """
        Send data to the client.

        Returns:
            True if send succeeded, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN so the client sees end of response
        2. drain whatever the client still sends, briefly
        3. close() releases the descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
