from __future__ import annotations

from typing import NamedTuple


class CalculatorError(Exception):
    """Base class for every error raised by the calculator."""


class UnknownFieldError(CalculatorError, KeyError):
    """Raised when a key is not part of the field schema."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown field '{self.key}'."


class FieldError(NamedTuple):
    """A single field that failed validation."""

    key: str
    reason: str


class ValidationError(CalculatorError):
    """Raised when a form record is incomplete or malformed.

    Args:
        errors: Offending fields in schema order.
    """

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__(f"Invalid fields: {[error.key for error in self.errors]}")

    def as_dict(self) -> dict[str, str]:
        """Return a mapping of field key -> reason."""
        return {error.key: error.reason for error in self.errors}


class EncodingError(CalculatorError):
    """Raised by strict encoding when a field would degrade to zeros."""

    def __init__(self, keys: list[str]) -> None:
        self.keys = list(keys)
        super().__init__(f"Fields cannot be encoded: {self.keys}")


class ModelLoadError(CalculatorError):
    """Raised when the inference graph cannot be loaded."""


class InferenceError(CalculatorError):
    """Raised when running the inference graph fails."""
