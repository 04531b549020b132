r""":mod:`range_reader.reader` exposes a class
:class:`~range_reader.reader.RangeReader`, a read-only, seekable file-like object
over a remote file whose bytes are fetched with HTTP range requests.

Every read is served either from the single cached window (the bytes of the most
recent fetch) or by a new partial content GET request, which replaces the window.
To save round trips, each request asks for at least
:attr:`~range_reader.reader.RangeReader.min_fetch` bytes.

Note: a :class:`~range_reader.reader.RangeReader` is NOT safe to share between
threads (it has one cursor and one window, mutated in place by every call).
"""

from __future__ import annotations

from io import SEEK_CUR, SEEK_END, SEEK_SET, RawIOBase
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

MYPY = False  # when using mypy will be overrided as True
if MYPY or not TYPE_CHECKING:  # pragma: no cover
    import httpx  # avoid importing to Sphinx type checker

if TYPE_CHECKING:  # pragma: no cover
    from ranges import Range

from .http_utils import (
    ContentLengthMismatchError,
    SizeUnavailableError,
    content_length,
    is_success_status,
    range_header,
)
from .log_utils import log
from .range_utils import EndOfDataError, amplify, clamp_length, fetch_range
from .types import HTTPClient, Logger
from .window import CacheWindow

__all__ = ["RangeReader", "DEFAULT_MIN_FETCH"]

DEFAULT_MIN_FETCH = 1024 * 1024  # 1 MiB


class RangeReader(RawIOBase):
    """
    A file being read from a server which supports range requests, through the
    familiar :class:`io.RawIOBase` interface (:meth:`read`, :meth:`readinto`,
    :meth:`seek`, :meth:`tell`) plus positional reads that leave the cursor
    alone (:meth:`read_at`, :meth:`read_range`) and a :meth:`size` query.

    The total size is not requested up front: it is learnt from a full content
    (status 200) response, from a HEAD request sent by :meth:`size` (or by
    seeking relative to the end), or given at initialisation as ``known_size``.
    Once known it never changes, and no read is sent past it.
    """

    _window: CacheWindow | None = None
    """
    The bytes of the most recent successful fetch (``None`` before the first).
    Replaced wholesale on every cache miss, never merged.
    """

    _owns_client: bool = False
    _request_url: httpx.URL | None = None

    def __init__(
        self,
        url: str,
        client=None,  # don't hint httpx.Client (Sphinx gives error)
        known_size: int | None = None,
        min_fetch: int = DEFAULT_MIN_FETCH,
        logger: Logger | None = None,
    ):
        """
        Set up a reader for the file at ``url``. No request is sent until the
        first read or size query.

        By default (if ``client`` is left as ``None``) a fresh
        :class:`httpx.Client` will be created for the reader, and closed along
        with it. A client that is passed in is not closed (you must handle this
        yourself).

        Args:
          url        : (:class:`str`) The URL of the file to be read
          client     : (:class:`httpx.Client` | ``None``) The HTTPX client
                       to use for HTTP requests
          known_size : (:class:`int` | ``None``) The total size of the file, if
                       already known (saves a HEAD request when seeking from the end)
          min_fetch  : (:class:`int`) The minimum number of bytes to request on a
                       cache miss (``0`` to request only what is asked for)
          logger     : (:class:`logging.Logger` | ``None``) Where to log requests
                       and cache decisions (default: the ``range_reader`` logger)
        """
        super().__init__()
        if min_fetch < 0:
            raise ValueError(f"{min_fetch=} must not be negative")
        if known_size is not None and known_size < 0:
            raise ValueError(f"{known_size=} must not be negative")
        self.url = url
        self.known_size = known_size
        self.min_fetch = min_fetch
        self.set_logger(logger)
        self.set_client(client=client)
        self._position = 0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__} ⠶ {self.window_range} @ "
            f"'{self.name}' from {self.domain}"
        )

    def set_client(self, client) -> None:
        """
        Check client type explicitly to handle an optional HTTPX client.

        Args:
          client : (:class:`httpx.Client` | ``None``) The client to be used for all
                   HTTP requests made by the reader. If ``None``, a fresh one
                   will be created (owned by the reader, and following redirects).
        """
        if client is None:
            client = httpx.Client(follow_redirects=True)
            self._owns_client = True
        elif isinstance(client, httpx.AsyncClient):
            raise TypeError(f"{client=} is async (only synchronous clients supported)")
        elif not isinstance(client, HTTPClient):
            raise TypeError(f"{client=} cannot build and send requests")
        else:
            self._owns_client = False
        self.client: HTTPClient = client

    def set_logger(self, logger: Logger | None) -> None:
        if logger is not None and not isinstance(logger, Logger):
            raise TypeError(f"{logger=} has no info and debug methods")
        self.log = log if logger is None else logger

    @property
    def name(self) -> str:
        return Path(urlparse(self.url).path).name

    @property
    def domain(self) -> str:
        return urlparse(self.url).netloc

    @property
    def request_url(self) -> httpx.URL:
        """
        The :attr:`url` parsed into a :class:`httpx.URL` (on first use, then reused).
        """
        if self._request_url is None:
            self._request_url = httpx.URL(self.url)
        return self._request_url

    @property
    def window(self) -> bytes | None:
        """A copy of the cached window's bytes (``None`` if nothing is cached)."""
        return None if self._window is None else self._window.getvalue()

    @property
    def window_range(self) -> Range | None:
        """The :class:`~ranges.Range` of positions cached (``None`` if nothing is)."""
        return None if self._window is None else self._window.range

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._position

    def seek(self, offset: int, whence: int = SEEK_SET) -> int:
        """
        File-like seeking, setting the position for the next :meth:`read`.

        Seeking relative to the end requires the total size, so will send a HEAD
        request if it is not yet known. A position past the end or before the
        start raises :class:`~range_reader.range_utils.EndOfDataError` there (and
        the position is left where it was), whereas an absolute or relative seek
        is not checked (a read from outside the file will just give no bytes).

        Args:
          offset : the position (``SEEK_SET``) or relative movement
          whence : :data:`io.SEEK_SET`, :data:`io.SEEK_CUR`, or :data:`io.SEEK_END`
        """
        self.log.debug("got seek %s %s", offset, whence)
        if whence == SEEK_SET:
            position = offset
        elif whence == SEEK_CUR:
            position = self._position + offset
        elif whence == SEEK_END:
            total = self.size()
            position = total + offset
            if position > total or position < 0:
                raise EndOfDataError(f"Cannot seek to {position} (size {total})")
        else:
            raise ValueError(f"Invalid {whence=} (must be 0, 1, or 2)")
        self._position = position
        return position

    def readinto(self, b) -> int:
        """
        Read up to ``len(b)`` bytes from the current position into ``b`` and move
        the position past them. At the end of the file, ``0`` is returned (so
        :meth:`read` gives ``b""``), and a read that runs into the end returns the
        bytes before it.
        """
        if self.closed:
            raise ValueError("I/O operation on closed file")
        self.log.debug("got read len %s", len(b))
        try:
            n = self.read_at(b, self._position)
        except EndOfDataError as exc:
            n = exc.count
        self._position += n
        return n

    def read_at(self, buf, offset: int) -> int:
        """
        Fill ``buf`` with the bytes at ``offset``, without moving the position.

        Either the buffer is filled completely, or
        :class:`~range_reader.range_utils.EndOfDataError` is raised, with the
        number of bytes which were copied into ``buf`` on its ``count`` attribute.
        """
        with memoryview(buf) as view:
            size = view.nbytes
        n = self.read_range(buf, offset, size)
        if n < size:
            raise EndOfDataError(f"Read {n} of {size} bytes at {offset=}", count=n)
        return n

    def read_range(self, buf, offset: int, length: int) -> int:
        """
        Read ``length`` bytes at ``offset`` (the primitive behind every other read),
        copying as many of them as fit into ``buf``.

        If the bytes are all within the cached window, they are copied from there.
        Otherwise a range request is sent for at least
        :attr:`min_fetch` bytes (but not past the known size) and the response
        becomes the new window.

        Args:
          buf    : writable bytes-like object to copy into
          offset : absolute position of the first byte
          length : number of bytes wanted (may be more than fit in ``buf``)

        Returns:
          The number of bytes copied into ``buf``.

        Raises:
          EndOfDataError             : if ``offset`` is negative or at/past the
                                       known end, or the server answers with
                                       anything but 200 or 206.
          ContentLengthMismatchError : if the response body was not as long as
                                       its ``content-length`` header said.
        """
        self.log.debug("read_range len %s off %s", length, offset)
        if offset < 0:
            raise EndOfDataError(f"Cannot read at negative {offset=}")
        wanted = clamp_length(offset, length, self.known_size)
        fetch_len = clamp_length(offset, amplify(length, self.min_fetch), self.known_size)
        stop = offset + wanted
        window = self._window
        # only the wanted bytes need be cached: amplification widens the fetch alone
        if window is not None and window.covers(offset, stop):
            self.log.debug(
                "cache hit: range (%s-%s) is within cache (%s-%s)",
                offset,
                stop,
                window.offset,
                window.end,
            )
            return window.copy_into(buf, offset, stop)
        if window is None:
            self.log.debug("cache miss: cache empty")
        else:
            self.log.debug(
                "cache miss: range (%s-%s) is NOT within cache (%s-%s)",
                offset,
                stop,
                window.offset,
                window.end,
            )
        return self.fetch_into(buf, offset=offset, wanted=wanted, fetch_len=fetch_len)

    def build_request(self, method: str, headers: dict[str, str] | None = None):
        return self.client.build_request(
            method=method, url=self.request_url, headers=headers
        )

    def fetch_into(self, buf, offset: int, wanted: int, fetch_len: int) -> int:
        """
        Send a streaming GET request for ``fetch_len`` bytes at ``offset``, load the
        response into the window, and copy up to ``wanted`` bytes into ``buf``.

        The response is always drained and closed. If reading it failed, an error
        closing it is only logged, so that the first error is the one raised.
        """
        request = self.build_request(
            method="GET", headers=range_header(fetch_range(offset, fetch_len))
        )
        self.log.info("Start HTTP GET with Range: %s", request.headers["range"])
        response = self.client.send(request, stream=True)
        try:
            n = self.load_response(response, buf, offset=offset, wanted=wanted)
        except Exception:
            try:
                self.drain_and_close(response)
            except (httpx.HTTPError, httpx.StreamError, OSError) as close_exc:
                self.log.debug("Discarding error on closing response: %r", close_exc)
            raise
        self.drain_and_close(response)
        return n

    def load_response(self, response, buf, offset: int, wanted: int) -> int:
        """
        Replace the window with the body of a successful ``response`` to a range
        request for the bytes at ``offset``, and copy up to ``wanted`` bytes into
        ``buf``.

        A partial content (206) body begins at ``offset``. A full content (200)
        body is the entire file (the server ignored the range) so begins at ``0``,
        and gives the total size if it was not yet known.
        """
        status = response.status_code
        self.log.info("Response status: %s", status)
        if not is_success_status(status):
            raise EndOfDataError(f"Got HTTP {status} for range request at {offset=}")
        is_full_content = status == 200
        if self._window is None:
            self._window = CacheWindow()
        window = self._window
        read = window.refill(0 if is_full_content else offset, response.iter_raw())
        expected = content_length(response.headers)
        if expected is not None and expected > 0 and expected != read:
            raise ContentLengthMismatchError(read=read, expected=expected)
        if is_full_content and self.known_size is None:
            self.known_size = read
        self.log.debug("loaded %s bytes into cache at %s", read, window.offset)
        available = window.available_from(offset)
        if is_full_content and available == 0:
            raise EndOfDataError(f"{offset=} is past the end of the content ({read})")
        return window.copy_into(buf, offset, offset + min(available, wanted))

    @staticmethod
    def drain_and_close(response) -> None:
        """
        Read the rest of the body (if not already read), so the connection can be
        reused, then close the response.
        """
        if not response.is_stream_consumed:
            for _ in response.iter_raw():
                pass
        response.close()

    def size(self) -> int:
        """
        The total size of the file, sending a HEAD request to find it out the first
        time (unless it was already learnt from a full content response or given
        at initialisation).

        Raises:
          SizeUnavailableError : if the HEAD response has no (or a negative)
                                 ``content-length`` header
        """
        if self.known_size is not None:
            return self.known_size
        request = self.build_request(method="HEAD")
        response = self.client.send(request)
        response.raise_for_status()
        length = content_length(response.headers)
        self.log.debug("url: %s, size %s", self.url, length)
        if length is None:
            raise SizeUnavailableError(f"HEAD request for {self.url} gave no content length")
        if length < 0:
            raise SizeUnavailableError(f"HEAD request for {self.url} gave {length=}")
        self.known_size = length
        return length

    def close(self) -> None:
        """
        Close the reader, and its client if it was created by the reader.
        """
        if not self.closed and self._owns_client:
            self.client.close()
        super().close()
