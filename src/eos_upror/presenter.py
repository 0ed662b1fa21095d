from __future__ import annotations

import math

from eos_upror.constants import RESULT_LABEL


def present(probability: float) -> str:
    """Format a probability as a whole percentage, rounding halves up.

    The value is not clamped, so out-of-range probabilities show as such.
    """
    return f"{math.floor(probability * 100 + 0.5)}%"


def format_result(probability: float) -> str:
    """Return the result line shown under the form."""
    return f"{RESULT_LABEL}: {present(probability)}"
