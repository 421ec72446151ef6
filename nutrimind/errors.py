"""Exceptions raised by the NutriMind client.

Transport failures are not wrapped: :class:`httpx.TransportError` and its
subclasses propagate unchanged from the pipeline.
"""

from __future__ import annotations


class NutriMindError(Exception):
    """Base class for every error raised by this package."""


class AuthExpired(NutriMindError):
    """The server rejected a request that was already replayed with a fresh token."""

    def __init__(self, method: str = "", url: str = "") -> None:
        self.method = method
        self.url = url
        target = f" for {method} {url}" if method else ""
        super().__init__(f"Access token rejected after refresh{target}")


class AuthRefreshFailed(NutriMindError):
    """The refresh episode failed; the stored credential has been cleared."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class RefreshError(NutriMindError):
    """Raised by a refresh client when the refresh credential is not accepted."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class ApiError(NutriMindError):
    """An endpoint answered with a non-2xx status or ``success: false``."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        self.message = message or f"HTTP {status_code}"
        super().__init__(self.message)
