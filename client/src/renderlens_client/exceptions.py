"""Custom exceptions for the renderlens client contexts."""

from __future__ import annotations


class ChannelError(Exception):
    """Base class for channel errors."""


class ChannelClosedError(ChannelError):
    """Raised when posting on a port that was closed on this side."""


class ExpressionClientError(Exception):
    """Raised when the page cannot be asked to evaluate an expression."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
