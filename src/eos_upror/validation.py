from __future__ import annotations

import math
import re
from types import MappingProxyType
from typing import Any, Mapping

from loguru import logger

from eos_upror.errors import FieldError, ValidationError
from eos_upror.schema import SCHEMA, ContinuousField

REQUIRED = "Required"
NOT_A_NUMBER = "Must be a number"

ValidatedRecord = Mapping[str, float | str]

_DECIMAL = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_number(value: Any) -> float | None:
    """Parse a finite decimal number.

    Args:
        value: Number or text typed by the user.

    Returns:
        The parsed float, or None when the value is not a finite number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _DECIMAL.fullmatch(text):
            return None
        number = float(text)
    else:
        return None
    return number if math.isfinite(number) else None


def validate(record: Mapping[str, Any]) -> ValidatedRecord:
    """Check that a form record is complete before it is encoded.

    Every schema key needs a value. Continuous values have to parse as finite
    numbers. Categorical values only have to be non-empty strings; membership
    in the option set is left to the encoder.

    Args:
        record: Form values keyed by field key.

    Returns:
        Read-only mapping with continuous values coerced to float.

    Raises:
        ValidationError: Listing every offending field, in schema order.
    """
    errors: list[FieldError] = []
    validated: dict[str, float | str] = {}

    for key, field in SCHEMA.items():
        value = record.get(key)
        if _is_blank(value):
            errors.append(FieldError(key, REQUIRED))
            continue

        if isinstance(field, ContinuousField):
            number = parse_number(value)
            if number is None:
                errors.append(FieldError(key, NOT_A_NUMBER))
                continue
            validated[key] = number
        elif isinstance(value, str):
            validated[key] = value
        else:
            errors.append(FieldError(key, REQUIRED))

    if errors:
        logger.debug(f"Validation failed for fields: {[error.key for error in errors]}")
        raise ValidationError(errors)

    return MappingProxyType(validated)
