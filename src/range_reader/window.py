from __future__ import annotations

from io import BytesIO
from typing import Iterable

from ranges import Range

__all__ = ["CacheWindow"]


class CacheWindow(BytesIO):
    """
    A thin wrapper to :class:`io.BytesIO` holding the bytes of the most recent
    fetch, along with the absolute ``offset`` of its first byte in the remote
    resource.

    The same buffer is refilled on every fetch (its storage is reused rather
    than reallocated), and its bytes only leave it by being copied.
    """

    def __init__(self, offset: int = 0):
        super().__init__()
        self.offset = offset

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} ⠶ {self.range}"

    def __len__(self) -> int:
        with self.getbuffer() as view:
            return view.nbytes

    @property
    def end(self) -> int:
        """Absolute position just past the last byte held."""
        return self.offset + len(self)

    @property
    def range(self) -> Range:
        """The half-open ``[offset, end)`` :class:`~ranges.Range` held."""
        return Range(self.offset, self.end)

    def refill(self, offset: int, chunks: Iterable[bytes]) -> int:
        """
        Replace the contents with ``chunks`` (for example a response's raw byte
        iterator), starting at absolute position ``offset``.

        The offset is set before any chunk is consumed, so if the iterator
        fails part way the bytes written so far are held at the right position.

        Returns:
          The number of bytes written.
        """
        self.offset = offset
        self.seek(0)
        self.truncate()
        written = 0
        for chunk in chunks:
            written += self.write(chunk)
        return written

    def covers(self, start: int, stop: int) -> bool:
        """
        Whether the positions ``[start, stop)`` lie entirely within the window.
        Partial overlap does not count.
        """
        return start >= self.offset and stop <= self.end

    def available_from(self, position: int) -> int:
        """Number of bytes held from absolute ``position`` onwards (``0`` if outside)."""
        if position < self.offset:
            return 0
        return max(self.end - position, 0)

    def copy_into(self, buf, start: int, stop: int) -> int:
        """
        Copy the bytes at absolute positions ``[start, stop)`` into ``buf``,
        truncated to fit ``buf``.

        Returns:
          The number of bytes copied.
        """
        lo = start - self.offset
        with memoryview(buf) as raw, raw.cast("B") as dest, self.getbuffer() as view:
            n = min(stop - start, dest.nbytes)
            dest[:n] = view[lo : lo + n]
        return n
