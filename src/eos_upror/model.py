from __future__ import annotations

from typing import Mapping, Sequence

import torch
from torch import nn

from eos_upror.encoding import input_signature


class UprorLogisticRegression(nn.Module):
    """Logistic regression over the named calculator inputs.

    Each input is passed as its own ``(batch, 1)`` tensor so the exported graph
    declares one named input per encoded slot.

    Args:
        input_names: Ordered input names. Defaults to the encoder signature.
    """

    def __init__(self, input_names: Sequence[str] | None = None) -> None:
        super().__init__()
        self.input_names = list(input_names) if input_names is not None else input_signature()
        self.linear = nn.Linear(len(self.input_names), 1)

    def forward(self, *features: torch.Tensor) -> torch.Tensor:
        """Run a forward pass.

        Args:
            features: One tensor of shape (batch, 1) per input name.

        Returns:
            Class probabilities with shape (batch, 2), ordered [no UPROR, UPROR].
        """
        if len(features) != len(self.input_names):
            raise ValueError(f"Expected {len(self.input_names)} inputs, but got {len(features)}.")
        x = torch.cat(features, dim=1)
        positive = torch.sigmoid(self.linear(x))
        return torch.cat([1 - positive, positive], dim=1)

    @classmethod
    def from_coefficients(
        cls,
        intercept: float,
        coefficients: Mapping[str, float],
        input_names: Sequence[str] | None = None,
    ) -> "UprorLogisticRegression":
        """Build a model from a fitted coefficient table.

        Args:
            intercept: Fitted intercept.
            coefficients: Coefficient per input name.
            input_names: Ordered input names. Defaults to the encoder signature.

        Raises:
            ValueError: If the table does not cover exactly the input names.
        """
        model = cls(input_names)
        missing = [name for name in model.input_names if name not in coefficients]
        unexpected = sorted(set(coefficients) - set(model.input_names))
        if missing or unexpected:
            raise ValueError(f"Coefficient table mismatch. Missing: {missing}, unexpected: {unexpected}")

        weights = [float(coefficients[name]) for name in model.input_names]
        with torch.no_grad():
            model.linear.weight.copy_(torch.tensor([weights], dtype=torch.float32))
            model.linear.bias.fill_(float(intercept))
        model.eval()
        return model
