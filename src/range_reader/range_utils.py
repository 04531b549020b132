from __future__ import annotations

__all__ = [
    "EndOfDataError",
    "range_termini",
    "range_len",
    "fetch_range",
    "amplify",
    "clamp_length",
]

from ranges import Range


class EndOfDataError(EOFError):
    """
    No (more) data is available at the requested position: the offset is
    negative, at or past the known end of the resource, or the server did not
    answer with partial or full content.

    This is the routine 'exhausted stream' outcome rather than a fault. When
    raised by :meth:`~range_reader.reader.RangeReader.read_at` after a short
    read, :attr:`count` holds the number of bytes that were copied into the
    caller's buffer before the end was reached.
    """

    def __init__(self, msg: str = "End of data", count: int = 0):
        super().__init__(msg)
        self.count = count


def range_termini(rng: Range) -> tuple[int, int]:
    """Get the inclusive start and end positions ``[start,end]``
    from a :class:`ranges.Range`. These are referred to as the
    'termini'. Ranges are always ascending.

    Args:
      rng : A :class:`~ranges.Range` (which by default will be
            half-closed, i.e. not inclusive of the end position).
    """
    if rng.isempty():
        raise ValueError("Empty range has no termini")
    start = rng.start if rng.include_start else rng.start + 1
    end = rng.end if rng.include_end else rng.end - 1
    return start, end


def range_len(rng: Range) -> int:
    """Get the number of positions in a :class:`~ranges.Range` (``0`` if empty).

    Args:
      rng : A :class:`~ranges.Range` (which by default will be
            half-closed, i.e. not inclusive of the end position).
    """
    if rng.isempty():
        return 0
    rmin, rmax = range_termini(rng)
    return rmax - rmin + 1


def fetch_range(offset: int, length: int) -> Range:
    """
    The half-open ``[offset, offset+length)`` :class:`~ranges.Range` to request.
    A zero ``length`` gives the empty range at ``offset`` (sent as a single byte
    probe, see :func:`~range_reader.http_utils.byte_range_from_range_obj`).
    """
    if offset < 0 or length < 0:
        raise ValueError(f"Cannot request {length=} bytes at {offset=}")
    return Range(offset, offset + length)


def amplify(length: int, min_fetch: int) -> int:
    """
    Widen ``length`` to at least ``min_fetch`` bytes (``0`` disables this).
    """
    return max(length, min_fetch) if min_fetch else length


def clamp_length(offset: int, length: int, known_size: int | None) -> int:
    """
    Clamp ``length`` so that ``offset + length`` does not pass ``known_size``
    (if the size is known at all).

    Raises :class:`EndOfDataError` if ``offset`` is at or past the known end,
    since no byte could be served there.

    Args:
      offset     : absolute position of the first byte wanted
      length     : number of bytes wanted
      known_size : total length of the resource, or ``None`` if not discovered
    """
    if known_size is None:
        return length
    if offset >= known_size:
        raise EndOfDataError(f"Offset {offset} is at or past the end ({known_size})")
    return min(known_size - offset, length)
