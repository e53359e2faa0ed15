"""
=============================================================================
BOUNDED BYTE BUFFER
=============================================================================

A fixed-capacity byte buffer with an owned write cursor.

Two parts of the server need "a block of N bytes that fills up":

    1. The SHA-1 engine collects input into 64-byte blocks before each
       call to the compression function.
    2. A connection collects received bytes until a full request header
       section is present (or the limit is reached).

Both used to be written as a raw array plus a loose index variable. Here
the array and its cursor live together, and every write is checked
against the capacity chosen at construction time.

=============================================================================
LAYOUT
=============================================================================

        capacity = 8
    ┌────┬────┬────┬────┬────┬────┬────┬────┐
    │ 47 │ 45 │ 54 │ 20 │ 00 │ 00 │ 00 │ 00 │
    └────┴────┴────┴────┴────┴────┴────┴────┘
                          ▲
                       cursor = 4        remaining = 4

    write(b"/abcdef")  → stores b"/abc", returns 4, buffer is now full
    write_at(6, b"xy") → overwrites the last two bytes, cursor unchanged
    zero_fill()        → zeroes everything from the cursor on; call it
                         before write_at() past the cursor, never after
    reset()            → zeroes storage, cursor back to 0

=============================================================================
"""

from typing import Union


BytesLike = Union[bytes, bytearray, memoryview]


class BoundedBuffer:
    """
    Fixed-size byte storage with a write cursor.

    Attributes:
        capacity: Number of bytes the buffer can hold. Never changes.
        cursor: Index of the next byte to be written (0..capacity).
    """

    __slots__ = ("capacity", "cursor", "_data")

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be > 0, got {capacity}")
        self.capacity = capacity
        self.cursor = 0
        self._data = bytearray(capacity)

    def __len__(self) -> int:
        return self.cursor

    def __repr__(self) -> str:
        return f"BoundedBuffer(capacity={self.capacity}, cursor={self.cursor})"

    @property
    def remaining(self) -> int:
        """Bytes that can still be written before the buffer is full."""
        return self.capacity - self.cursor

    @property
    def is_full(self) -> bool:
        return self.cursor == self.capacity

    def write(self, data: BytesLike) -> int:
        """
        Copy as much of `data` as fits, starting at the cursor.

        Returns:
            Number of bytes actually stored. The caller is responsible
            for keeping the rest (see SHA1Context.add).
        """
        count = min(len(data), self.remaining)
        if count:
            self._data[self.cursor:self.cursor + count] = data[:count]
            self.cursor += count
        return count

    def write_at(self, offset: int, data: BytesLike) -> None:
        """
        Overwrite bytes at a fixed offset without moving the cursor.

        Raises:
            IndexError: If the write would fall outside the buffer.
        """
        end = offset + len(data)
        if offset < 0 or end > self.capacity:
            raise IndexError(
                f"write of {len(data)} bytes at offset {offset} "
                f"exceeds capacity {self.capacity}"
            )
        self._data[offset:end] = data

    def zero_fill(self) -> None:
        """Zero everything after the cursor and mark the buffer full."""
        self._data[self.cursor:] = bytes(self.remaining)
        self.cursor = self.capacity

    def reset(self) -> None:
        """Empty the buffer. Storage is zeroed, cursor returns to 0."""
        self._data[:] = bytes(self.capacity)
        self.cursor = 0

    def getvalue(self) -> bytes:
        """Return a copy of the bytes written so far."""
        return bytes(self._data[:self.cursor])

    def view(self) -> memoryview:
        """Zero-copy, read-only view of the bytes written so far."""
        return memoryview(self._data)[:self.cursor].toreadonly()
