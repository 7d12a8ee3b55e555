"""Exceptions raised by golden screenshot comparison and masking."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from goldenshot.models.comparison import ComparisonResult


class GoldenCheckError(Exception):
    """Base class for all goldenshot errors."""


class StagingError(GoldenCheckError):
    """Raised when captured screenshot data cannot be written to temp storage."""

    def __init__(self, reason: str, path: str | None = None) -> None:
        self.reason = reason
        self.path = path
        location = f" ({path})" if path else ""
        super().__init__(f"Could not stage screenshot{location}: {reason}")


class OracleError(GoldenCheckError):
    """Raised when the pixel oracle fails to read, compare, or render images."""

    def __init__(self, message: str, result: ComparisonResult | None = None) -> None:
        self.result = result
        super().__init__(message)


class ComparisonFailure(GoldenCheckError):
    """A comparison that finished with a failing verdict."""

    def __init__(self, result: ComparisonResult) -> None:
        self.result = result
        super().__init__(result.detail)


class MismatchError(ComparisonFailure):
    """The screenshot does not match its golden and update mode is off."""


class DiffWriteError(ComparisonFailure):
    """A mismatch was found but the diff image could not be saved."""


class MaskError(GoldenCheckError):
    """Raised when a mask cannot be placed over an element."""
