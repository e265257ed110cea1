"""Cursor-based reader over an in-memory byte buffer.

Nothing here raises on malformed input. Every operation reports failure
through its return value; failed seeks leave the cursor unchanged.
"""

from __future__ import annotations

from typing import Optional, Union

# space, tab, LF, VT, CR
WHITESPACE = frozenset(b" \t\n\v\r")


class StreamReader:
    """Read-only view of a byte buffer with a shared, mutable cursor.

    Parsers pass the same reader instance around so that every helper
    advances one common position.
    """

    def __init__(self, buffer: Union[bytes, bytearray, memoryview, str]):
        if isinstance(buffer, str):
            buffer = buffer.encode("utf-8")
        self._buf = bytes(buffer)
        self._idx = 0

    @property
    def size(self) -> int:
        return len(self._buf)

    def tell(self) -> int:
        return self._idx

    def eof(self) -> bool:
        return self._idx >= len(self._buf)

    def seek_set(self, offset: int) -> bool:
        """Move to an absolute offset. Fails if outside ``[0, size]``."""
        if offset < 0 or offset > len(self._buf):
            return False
        self._idx = offset
        return True

    def seek_from_current(self, delta: int) -> bool:
        """Move relative to the cursor. Fails if the result leaves ``[0, size]``."""
        pos = self._idx + delta
        if pos < 0 or pos > len(self._buf):
            return False
        self._idx = pos
        return True

    def _clamped(self, n: int) -> int:
        return max(0, min(n, len(self._buf) - self._idx))

    def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes."""
        length = self._clamped(n)
        chunk = self._buf[self._idx:self._idx + length]
        self._idx += length
        return chunk

    def readinto(self, n: int, dst: Union[bytearray, memoryview]) -> int:
        """Copy up to ``n`` bytes into ``dst``.

        Returns the number of bytes copied. If ``dst`` is smaller than the
        clamped length nothing is copied and 0 is returned.
        """
        length = self._clamped(n)
        if length == 0 or len(dst) < length:
            return 0
        dst[:length] = self._buf[self._idx:self._idx + length]
        self._idx += length
        return length

    def read1(self) -> Optional[int]:
        """Read a single byte, or None at end of buffer."""
        if self._idx + 1 > len(self._buf):
            return None
        val = self._buf[self._idx]
        self._idx += 1
        return val

    def read_token(self) -> Optional[str]:
        """Read the next whitespace-delimited token.

        Leading whitespace is skipped. The whitespace byte that ends the
        token is consumed. Returns None if the buffer runs out (or a NUL
        byte is hit) before any token byte is read.
        """
        c = self.read1()
        while c is not None and c in WHITESPACE:
            c = self.read1()
        if c is None or c == 0:
            return None

        token = bytearray()
        while c is not None and c not in WHITESPACE:
            if c == 0:
                break
            token.append(c)
            c = self.read1()

        return token.decode("utf-8", errors="replace")

    def read_line(self) -> Optional[str]:
        """Read up to and including the next LF. Returns the line without
        its line ending, or None when already at end of buffer."""
        if self.eof():
            return None
        end = self._buf.find(b"\n", self._idx)
        if end < 0:
            end = len(self._buf)
            raw = self._buf[self._idx:end]
            self._idx = end
        else:
            raw = self._buf[self._idx:end]
            self._idx = end + 1
        return raw.rstrip(b"\r").decode("utf-8", errors="replace")
