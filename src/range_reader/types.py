from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

__all__ = ["HTTPClient", "Logger"]


@runtime_checkable
class HTTPClient(Protocol):
    """
    The part of :class:`httpx.Client` that a
    :class:`~range_reader.reader.RangeReader` uses to issue its requests.
    Retries, timeouts and connection reuse are the client's business.
    """

    def build_request(self, method: str, url: Any, **kwargs: Any) -> Any:
        ...

    def send(self, request: Any, **kwargs: Any) -> Any:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Logger(Protocol):
    """Anything with %-style ``info`` and ``debug`` methods, such as :class:`logging.Logger`."""

    def info(self, msg: str, *args: Any) -> None:
        ...

    def debug(self, msg: str, *args: Any) -> None:
        ...
