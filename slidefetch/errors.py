"""
Error taxonomy for SlideFetch.

Every error carries the HTTP status code the API layer answers with, so the
server can turn any of them into a ``{"error": message}`` body.
"""

from typing import Optional


class SlideFetchError(Exception):
    """Base class for all SlideFetch failures."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SlideFetchError):
    """Missing or malformed request fields."""

    status_code = 400


class NotFoundError(SlideFetchError):
    """Upstream marker or download file is missing."""

    status_code = 404


class UpstreamError(SlideFetchError):
    """The presentation host failed or returned something unusable."""


class FetchExhausted(UpstreamError):
    """An image could not be fetched within the retry budget."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None):
        detail = f"{type(last_error).__name__}: {last_error}" if last_error else "unknown error"
        super().__init__(f"Failed to fetch {url} after {attempts} attempts ({detail})")
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class InvalidFormat(SlideFetchError):
    """No assembler exists for the requested output format."""


class AssemblyError(SlideFetchError):
    """An artifact writer failed."""
