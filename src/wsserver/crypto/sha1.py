"""
=============================================================================
SHA-1 DIGEST ENGINE (FIPS 180-1)
=============================================================================

A from-scratch, streaming SHA-1 implementation. The WebSocket handshake
hashes "<client key><GUID>" with SHA-1, so the server carries its own
engine instead of depending on a crypto library.

=============================================================================
HOW SHA-1 WORKS
=============================================================================

    message bytes ──► 64-byte blocks ──► compression ──► 160-bit state
                                            ▲    │
                                            └────┘  (one call per block)

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          SHA1Context                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   state   = [H0, H1, H2, H3, H4]    five 32-bit words (IV below)    │
    │   block   = BoundedBuffer(64)       pending input, cursor 0..63     │
    │   length  = total bytes added       needed for the final padding    │
    │                                                                      │
    │   add(b"...")   fill block → full? compress, reset → repeat         │
    │   digest()      pad, append bit length, compress, emit 20 bytes     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PADDING
=============================================================================

The final block(s) look like this:

    ┌──────────────────────┬────┬──────────────────┬───────────────────┐
    │ remaining input      │ 80 │ 00 00 ... 00     │ bit length (8 B,  │
    │ (cursor bytes)       │    │                  │ big endian)       │
    └──────────────────────┴────┴──────────────────┴───────────────────┘
     0                 cursor                        56                64

When the cursor is past 55 there is no room left for the 8-byte length,
so the padded block is compressed on its own and the length goes into a
fresh, all-zero block. That is why a 56-byte message needs two blocks.

=============================================================================
INTERVIEW QUESTIONS ABOUT HASHING
=============================================================================

Q: "Is SHA-1 secure enough for the WebSocket handshake?"
A: "The accept key is not a security feature. It only proves the server
   understood the WebSocket handshake, so collision attacks on SHA-1
   don't matter here."

Q: "Why does a streaming hash API matter?"
A: "Input can arrive in any chunk size. The context buffers partial
   blocks so add(b'ab'); add(b'c') equals add(b'abc')."

=============================================================================
"""

from typing import List, Tuple, Union

from ..buffer import BoundedBuffer


BLOCK_SIZE = 64          # 512-bit message blocks
DIGEST_SIZE = 20         # 160-bit output
LENGTH_OFFSET = 56       # The bit length occupies block[56:64]

MASK_32 = 0xFFFFFFFF
MASK_64 = 0xFFFFFFFFFFFFFFFF

# Initial hash value H(0), FIPS 180-1 §7
INITIAL_STATE: Tuple[int, int, int, int, int] = (
    0x67452301,
    0xEFCDAB89,
    0x98BADCFE,
    0x10325476,
    0xC3D2E1F0,
)


State = Tuple[int, int, int, int, int]


class SHA1Context:
    """
    Incremental SHA-1 hash computation.

    Usage:
        context = SHA1Context()
        context.add(b"dGhlIHNhbXBsZSBub25jZQ==")
        context.add(b"258EAFA5-E914-47DA-95CA-C5AB0DC85B11")
        raw = context.digest()          # 20 bytes

    A context belongs to one computation. digest() pads the pending block
    in place, so after it the context is finished: further add() or
    digest() calls raise RuntimeError.
    """

    __slots__ = ("_block", "_length", "_state", "_finalized")

    def __init__(self):
        self._block = BoundedBuffer(BLOCK_SIZE)
        self._length = 0
        self._state: State = INITIAL_STATE
        self._finalized = False

    @property
    def length(self) -> int:
        """Total number of bytes passed to add() so far."""
        return self._length

    def add(self, data: Union[bytes, bytearray, memoryview]) -> "SHA1Context":
        """
        Feed more message bytes.

        Every time the pending block reaches 64 bytes it is compressed and
        the cursor goes back to 0, so block.cursor == length % 64 holds
        between calls.

        Returns:
            Self for chaining: SHA1Context().add(a).add(b).digest()
        """
        if self._finalized:
            raise RuntimeError("SHA1Context.add() called after digest()")

        view = memoryview(data).cast("B")
        self._length += len(view)

        while view:
            written = self._block.write(view)
            view = view[written:]

            if self._block.is_full:
                self._state = process_block(self._block.getvalue(), self._state)
                self._block.reset()

        return self

    def digest(self) -> bytes:
        """
        Finalize and return the 20-byte digest.

        Raises:
            RuntimeError: If the context was already finalized.
        """
        if self._finalized:
            raise RuntimeError("SHA1Context.digest() may only be called once")
        self._finalized = True

        block = self._block
        cursor = block.cursor

        # The 1 bit right after the message, then zeros
        block.write(b"\x80")
        block.zero_fill()

        if cursor >= LENGTH_OFFSET:
            # No room for the length field in this block
            self._state = process_block(block.getvalue(), self._state)
            block.reset()
            block.zero_fill()

        bit_length = (self._length * 8) & MASK_64
        block.write_at(LENGTH_OFFSET, bit_length.to_bytes(8, "big"))

        self._state = process_block(block.getvalue(), self._state)

        return b"".join(word.to_bytes(4, "big") for word in self._state)

    def hexdigest(self) -> str:
        """Finalize and return the digest as 40 lowercase hex characters."""
        return self.digest().hex()


def sha1(data: Union[bytes, bytearray, memoryview] = b"") -> bytes:
    """One-shot helper: SHA-1 digest of `data`."""
    return SHA1Context().add(data).digest()


# =============================================================================
# COMPRESSION FUNCTION
# =============================================================================

def _rotate_left(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & MASK_32


def _f(t: int, b: int, c: int, d: int) -> int:
    """Round function: Ch, Parity, Maj, Parity."""
    if t < 20:
        return (b & c) | (~b & d)
    elif t < 40:
        return b ^ c ^ d
    elif t < 60:
        return (b & c) | (b & d) | (c & d)
    else:
        return b ^ c ^ d


def _k(t: int) -> int:
    if t < 20:
        return 0x5A827999
    elif t < 40:
        return 0x6ED9EBA1
    elif t < 60:
        return 0x8F1BBCDC
    else:
        return 0xCA62C1D6


def _message_schedule(block: bytes) -> List[int]:
    """
    Expand a 64-byte block into the 80-word schedule W[0..79].

        W[0..15]  = the block as sixteen big-endian 32-bit words
        W[16..79] = rotl1(W[i-3] ^ W[i-8] ^ W[i-14] ^ W[i-16])
    """
    w = [int.from_bytes(block[i:i + 4], "big") for i in range(0, BLOCK_SIZE, 4)]

    for i in range(16, 80):
        w.append(_rotate_left(w[i - 3] ^ w[i - 8] ^ w[i - 14] ^ w[i - 16], 1))

    return w


def process_block(block: bytes, state: State) -> State:
    """
    Mix one 512-bit block into the running hash state.

    Args:
        block: Exactly 64 bytes.
        state: Current (H0, H1, H2, H3, H4).

    Returns:
        The new state. All additions wrap modulo 2**32.
    """
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"SHA-1 block must be {BLOCK_SIZE} bytes, got {len(block)}")

    w = _message_schedule(block)
    a, b, c, d, e = state

    for t in range(80):
        temp = (_rotate_left(a, 5) + _f(t, b, c, d) + e + w[t] + _k(t)) & MASK_32
        e = d
        d = c
        c = _rotate_left(b, 30)
        b = a
        a = temp

    return (
        (state[0] + a) & MASK_32,
        (state[1] + b) & MASK_32,
        (state[2] + c) & MASK_32,
        (state[3] + d) & MASK_32,
        (state[4] + e) & MASK_32,
    )
