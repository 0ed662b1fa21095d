from __future__ import annotations

import re
from typing import Any, Mapping

import numpy as np
from loguru import logger

from eos_upror.errors import EncodingError
from eos_upror.schema import SCHEMA, CategoricalField, FieldDescriptor
from eos_upror.validation import parse_number

TensorMap = dict[str, np.ndarray]

_NON_IDENTIFIER = re.compile(r"\W")


def slot_name(key: str, option: str) -> str:
    """Return the model input name of one categorical option.

    Example:
        >>> slot_name("amb_status_preop", "Non-ambulatory")
        'amb_status_preop_Non_ambulatory'
    """
    return f"{key}_{_NON_IDENTIFIER.sub('_', option)}"


def field_slots(field: FieldDescriptor) -> list[str]:
    """Return the input names a single field expands to."""
    if isinstance(field, CategoricalField):
        return [slot_name(field.key, option) for option in field.options]
    return [field.key]


def input_signature(schema: Mapping[str, FieldDescriptor] = SCHEMA) -> list[str]:
    """Return every input name the model expects, in schema order."""
    return [slot for field in schema.values() for slot in field_slots(field)]


def _scalar(value: float) -> np.ndarray:
    return np.array([[value]], dtype=np.float32)


def one_hot(value: Any, options: tuple[str, ...]) -> list[float]:
    """Encode a categorical selection as indicators in option order.

    A value that matches no option yields all zeros.
    """
    return [1.0 if value == option else 0.0 for option in options]


def encode(
    record: Mapping[str, Any],
    schema: Mapping[str, FieldDescriptor] = SCHEMA,
    *,
    strict: bool = False,
) -> TensorMap:
    """Turn a validated form record into the named tensors of the model.

    Continuous fields pass through under their own key. Categorical fields
    expand into one 0/1 indicator per option named ``{key}_{option}``. Every
    tensor is float32 with shape (1, 1).

    In lenient mode an unset continuous value becomes 0 and a categorical value
    outside the option set becomes all zeros. Strict mode raises instead.

    Args:
        record: Form values, normally the output of ``validate``.
        schema: Field schema describing the model inputs.
        strict: Raise instead of zero-filling degraded fields.

    Returns:
        Mapping of input name -> tensor, covering ``input_signature(schema)``.

    Raises:
        EncodingError: In strict mode, listing every degraded field.
    """
    tensors: TensorMap = {}
    degraded: list[str] = []

    for key, field in schema.items():
        value = record.get(key)
        if isinstance(field, CategoricalField):
            indicators = one_hot(value, field.options)
            if not any(indicators):
                degraded.append(key)
            for option, indicator in zip(field.options, indicators):
                tensors[slot_name(key, option)] = _scalar(indicator)
        else:
            number = parse_number(value)
            if number is None:
                degraded.append(key)
                number = 0.0
            tensors[key] = _scalar(number)

    if degraded:
        if strict:
            raise EncodingError(degraded)
        logger.warning(f"Encoding zero-filled fields without a usable value: {degraded}")

    return tensors
