from __future__ import annotations

from typing import Optional


class FetchError(Exception):
    """Base for failures reaching a page through the relay."""


class NetworkError(FetchError):
    """Transport failure (DNS, connection refused/reset, TLS, timeout) before a response arrived."""


class HttpError(FetchError):
    """The relay (or the origin behind it) answered with a non-success status."""

    def __init__(self, status: int, url: str = ""):
        self.status = int(status)
        self.url = url
        super().__init__(f"HTTP {self.status}" + (f" for {url}" if url else ""))


class DiscoveryError(Exception):
    """
    Raised by CameraDiscoveryService when a list/detail lookup fails.
    The underlying FetchError (or parse failure) is kept in `.cause` and `__cause__`.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def status(self) -> Optional[int]:
        return self.cause.status if isinstance(self.cause, HttpError) else None
