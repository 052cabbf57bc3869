"""Errors raised while fetching thread pages.

Only the transport layer originates these. The retry wrapper, the in-flight
registry and the page cache pass them through untouched.
"""
from typing import Optional


class FetchError(Exception):
    """Base class for thread page fetch failures."""


class InvalidRequestError(FetchError):
    """The tid/page pair cannot form a valid request. Never retried."""


class TransientFetchError(FetchError):
    """An upstream condition that may clear on a later attempt."""


class EmptyResponseError(TransientFetchError):
    """The upstream answered 2xx with an empty body."""


class HTTPStatusError(TransientFetchError):
    """The upstream answered with a non-2xx status."""

    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        message = f"HTTP {status_code}"
        if url:
            message = f"{message} for {url}"
        super().__init__(message)


class TransportError(TransientFetchError):
    """The request never completed (connect, read, TLS, timeout...)."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")
