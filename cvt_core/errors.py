"""Exceptions raised by the timing calculator."""

from __future__ import annotations

from typing import Optional


class TimingError(ValueError):
    """Base class for rejected timing requests."""


class InvalidInputError(TimingError):
    """Raised when a resolution, refresh rate or variant is out of range."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class UnsupportedCombinationError(TimingError):
    """Raised for variant/flag combinations CVT does not define."""
