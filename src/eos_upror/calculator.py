from __future__ import annotations

from typing import Any, Mapping

from loguru import logger

from eos_upror.encoding import encode
from eos_upror.inference import InferenceInvoker
from eos_upror.validation import validate


async def calculate_risk(
    record: Mapping[str, Any],
    invoker: InferenceInvoker,
    *,
    strict: bool = False,
) -> float:
    """Compute the UPROR probability for one form submission.

    Args:
        record: Form values keyed by field key.
        invoker: Invoker holding the inference graph.
        strict: Fail on fields that would be zero-filled by the encoder.

    Returns:
        Probability of an unplanned return to the operating room.

    Raises:
        ValidationError: If the record is incomplete; nothing is encoded then.
        EncodingError: In strict mode, if a field cannot be encoded.
        ModelLoadError: If the inference graph cannot be loaded.
        InferenceError: If running the graph fails.
    """
    validated = validate(record)
    tensors = encode(validated, strict=strict)
    probability = await invoker.predict(tensors)
    logger.info(f"Prediction: prob_upror={probability:.3f}")
    return probability
