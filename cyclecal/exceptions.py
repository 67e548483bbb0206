"""Exceptions raised by the cyclecal engines and date utilities.

Insufficient history (no intervals, a single interval) is never an error;
the engines return documented fallback values for it instead.
"""

from __future__ import annotations

from typing import Any


class CycleCalError(Exception):
    """Base class for every error raised by this package."""


class InvalidDateError(CycleCalError, ValueError):
    """Raised when an input cannot be read as a civil (calendar) date.

    Covers unparseable strings, impossible calendar dates such as month 13
    or February 30, and values of an unsupported type.

    Attributes:
        value: The rejected input, as received
        reason: Short description of why it was rejected
    """

    def __init__(self, value: Any, reason: str | None = None) -> None:
        """Initialize InvalidDateError.

        Args:
            value: The rejected input
            reason: Optional explanation appended to the message
        """
        self.value = value
        self.reason = reason
        message = f"Invalid date: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class PreconditionViolation(CycleCalError, ValueError):
    """Raised when a record breaks a data-integrity rule the caller owns.

    The engines reject such records instead of correcting them: an interval
    whose end precedes its start is not swapped, a negative reminder offset
    is not clamped to zero.

    Attributes:
        field: Name of the offending record field
        value: The offending value
        detail: Human-readable description of the violated rule
    """

    def __init__(self, field: str, value: Any, detail: str) -> None:
        """Initialize PreconditionViolation.

        Args:
            field: Name of the offending record field
            value: The offending value
            detail: Description of the violated rule
        """
        self.field = field
        self.value = value
        self.detail = detail
        super().__init__(f"{field}={value!r}: {detail}")
