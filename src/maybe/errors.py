"""Structured error types for the sketch package.

Only construction can fail: once a sketch exists, every ``add`` and query on a
valid value completes. The hierarchy mirrors that:

- SketchError: base class, carries structured context
- InvalidConfigurationError: a sketch or config could not be built
- UnsupportedColumnError: a dataframe column cannot be sketched
"""

from __future__ import annotations

from typing import Any


class SketchError(Exception):
    """Base exception for all sketch errors.

    Keeps the offending parameters in ``context`` so that callers can log or
    report them without parsing the message.
    """

    def __init__(
        self,
        message: str,
        *,
        sketch: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.sketch = sketch
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "sketch": self.sketch,
            "context": self.context,
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.sketch:
            parts.append(f"sketch={self.sketch}")
        for key, value in self.context.items():
            parts.append(f"{key}={value!r}")
        return " | ".join(parts)


class InvalidConfigurationError(SketchError, ValueError):
    """Raised when a sketch is constructed with unusable parameters."""


class UnsupportedColumnError(SketchError, TypeError):
    """Raised when a column's dtype has no byte representation."""
