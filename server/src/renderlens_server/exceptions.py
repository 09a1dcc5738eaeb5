"""Custom exceptions for renderlens."""

from __future__ import annotations


class RenderLensError(Exception):
    """Base class for renderlens errors."""


class TracePathError(RenderLensError):
    """Raised when an array path does not address a node of the trace."""

    def __init__(self, array_path: str, reason: str) -> None:
        self.array_path = array_path
        super().__init__(f"Invalid trace path {array_path!r}: {reason}")


class ExpressionEvaluationError(RenderLensError):
    """Raised when an ad-hoc expression cannot be evaluated against a node."""

    def __init__(self, expression: str, original_error: Exception) -> None:
        self.expression = expression
        self.original_error = original_error
        super().__init__(
            f"Cannot evaluate {expression!r}: {type(original_error).__name__}: {original_error}"
        )
