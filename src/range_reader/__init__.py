r"""
:mod:`range_reader` provides random access to a remote file through an API
familiar to users of the standard library :mod:`io` module, using
:class:`~ranges.Range` (from the externally maintained
`python-ranges <https://python-ranges.readthedocs.io/en/latest/>`_ library)
to represent the byte ranges requested and cached.

Servers with support for `HTTP range requests
<https://developer.mozilla.org/en-US/docs/Web/HTTP/Range_requests>`_
can provide partial content requests, avoiding the need to download
the entire file just to read a few bytes from the middle or the end of it
(as an archive reader or media demuxer typically does).

A :class:`~range_reader.reader.RangeReader` is initialised by providing:

- a URL (the file to be read)
- (optionally) a client (:class:`httpx.Client`), or else a fresh one
  is created
- (optionally) the total size of the file, if already known
- (optionally) the minimum number of bytes to request at a time
  (``min_fetch``, 1 MiB by default)

It can then be read like any seekable binary file:

    >>> from range_reader import RangeReader, _EXAMPLE_URL
    >>> r = RangeReader(url=_EXAMPLE_URL) # doctest: +SKIP
    >>> r.seek(-4, 2) # doctest: +SKIP
    7
    >>> len(r.read(4)) # doctest: +SKIP
    4

Each read is served from the cached 'window' (the bytes of the most recent
request) if it lies entirely within it, otherwise a new range request replaces the
window. Positional reads that leave the cursor alone are also available:

    >>> buf = bytearray(3) # doctest: +SKIP
    >>> r.read_at(buf, 0) # doctest: +SKIP
    3
    >>> r.window_range # doctest: +SKIP
    Range[0, 11)

When no more data can be read, :class:`~range_reader.range_utils.EndOfDataError`
(an :class:`EOFError`) is raised by :meth:`~range_reader.reader.RangeReader.read_at`
and :meth:`~range_reader.reader.RangeReader.read_range`, whereas
:meth:`~range_reader.reader.RangeReader.read` follows the usual convention of
returning ``b""``. Since the reader is a file-like object it can be handed
straight to e.g. :class:`zipfile.ZipFile`.
"""

# Get classes into package namespace but exclude from __all__ so Sphinx can access types

from . import http_utils, range_utils
from .http_utils import ContentLengthMismatchError, SizeUnavailableError
from .log_utils import set_up_logging
from .range_utils import EndOfDataError
from .reader import DEFAULT_MIN_FETCH, RangeReader

__all__ = [
    "reader",
    "window",
    "http_utils",
    "range_utils",
    "log_utils",
    "types",
]

__version__ = "0.1.0"
__author__ = "Louis Maddox"
__license__ = "MIT"
__description__ = "Random access to remote files via HTTP range requests."
__url__ = "https://github.com/lmmx/range-streams"
__uri__ = __url__
__email__ = "louismmx@gmail.com"

_EXAMPLE_DATA_URL = "https://github.com/lmmx/range-streams/raw/master/data/"
_EXAMPLE_URL = f"{_EXAMPLE_DATA_URL}example_text_file.txt"
