r"""When preparing a HTTP GET request, the HTTP `range request
<https://developer.mozilla.org/en-US/docs/Web/HTTP/Range_requests>`_
header must be provided as a :class:`dict`, for example:

.. code-block:: python

    {"range": "bytes=0-1"}

would request the two bytes at positions ``0`` and ``1`` (i.e. the inclusive
interval ``[0,1]``).

A request for zero bytes at position ``n`` is sent as the single byte probe
``bytes=n-n`` (there is no way to express an empty range that a server will
answer with partial content).
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:  # pragma: no cover
    from ranges import Range

from .range_utils import range_termini

__all__ = [
    "byte_range_from_range_obj",
    "range_header",
    "detect_header_value",
    "content_length",
    "is_success_status",
    "ContentLengthMismatchError",
    "SizeUnavailableError",
]

SUCCESS_STATUS_CODES = (200, 206)  # OK (full content), Partial Content


def byte_range_from_range_obj(rng: Range) -> str:
    """Prepare the byte range substring for a HTTP `range request
    <https://developer.mozilla.org/en-US/docs/Web/HTTP/Range_requests>`_.

    For example:

      >>> from range_reader.http_utils import byte_range_from_range_obj
      >>> byte_range_from_range_obj(Range(0,2))
      '0-1'
      >>> byte_range_from_range_obj(Range(5,5))
      '5-5'

    Args:
      rng : range of the bytes to be requested (0-based)

    Returns:
      A hyphen-separated string of inclusive start and end positions. An empty
      range at position ``n`` gives ``n-n``.
    """
    if rng.isempty():
        byte_range = f"{rng.start}-{rng.start}"
    else:
        start_byte, end_byte = range_termini(rng)
        byte_range = f"{start_byte}-{end_byte}"
    return byte_range


def range_header(rng: Range) -> dict[str, str]:
    """
    Prepare a :class:`dict` to pass as a ``httpx`` request header
    with a single key ``range`` whose value is the byte range.

    For example:

      >>> from range_reader.http_utils import range_header
      >>> range_header(Range(0,2))
      {'range': 'bytes=0-1'}

    Args:
      rng : range of the bytes to be requested (0-based)
    """
    byte_range = byte_range_from_range_obj(rng)
    return {"range": f"bytes={byte_range}"}


def detect_header_value(headers: Mapping[str, str], key: str, source: str = "Response"):
    """
    Detect a title case, lower case, or capitalised version of the given string.
    """
    variants = key.title(), key.lower(), key.capitalize()
    try:
        return next(headers.get(k) for k in variants if k in headers)
    except StopIteration:
        raise KeyError(f"{source} was missing '{key}' header")


def content_length(headers: Mapping[str, str]) -> int | None:
    """
    The ``content-length`` header as an integer, or ``None`` if it is absent
    or not a number (a negative value is returned as is, for the caller to reject).
    """
    try:
        value = detect_header_value(headers=headers, key="content-length")
    except KeyError:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def is_success_status(status_code: int) -> bool:
    """Whether a range GET can be served from: 200 (OK) or 206 (Partial Content)."""
    return status_code in SUCCESS_STATUS_CODES


class ContentLengthMismatchError(IOError):
    """
    The number of bytes read from a response body differed from the
    ``content-length`` header the server sent (truncated transfer).
    """

    def __init__(self, *, read: int, expected: int):
        super().__init__(f"Read {read} bytes but content length indicated {expected}")
        self.read = read
        self.expected = expected


class SizeUnavailableError(IOError):
    """
    A HEAD request did not yield a usable ``content-length``, so the total size
    of the resource cannot be discovered.
    """
