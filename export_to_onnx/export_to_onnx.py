import json
from pathlib import Path

import torch
import typer
from loguru import logger

from eos_upror import constants
from eos_upror.model import UprorLogisticRegression


def load_coefficients(coefficients_path: str) -> UprorLogisticRegression:
    """
    Build the logistic regression from a JSON coefficient table.

    The file holds ``{"intercept": float, "coefficients": {input_name: float}}``.

    Raises:
    ------
        ValueError: If the file is not a valid coefficient table.

    """
    try:
        payload = json.loads(Path(coefficients_path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Coefficient table must be valid JSON: {exc}") from exc
    if not isinstance(payload, dict) or "intercept" not in payload or "coefficients" not in payload:
        raise ValueError("Coefficient table needs 'intercept' and 'coefficients' entries.")
    return UprorLogisticRegression.from_coefficients(payload["intercept"], payload["coefficients"])


def export_to_onnx(
    coefficients_path: str,
    output: str | None = None,
) -> Path:
    """
    Export the UPROR logistic regression to ONNX format.

    Arguments:
    ---------
        coefficients_path (str): Path to the JSON coefficient table of the fitted model.
        output (str | None): Path to save the ONNX model.
            If None, saves alongside the coefficient table with .onnx extension.

    Returns:
    -------
        Path: The path to the saved ONNX model.

    """
    model = load_coefficients(coefficients_path)

    example_inputs = tuple(torch.zeros(1, 1) for _ in model.input_names)

    output_file = Path(output) if output is not None else Path(coefficients_path).with_suffix(".onnx")
    output_file.parent.mkdir(parents=True, exist_ok=True)

    torch.onnx.export(
        model,
        example_inputs,
        output_file,
        export_params=True,
        opset_version=constants.ONNX_OPSET,
        do_constant_folding=True,
        input_names=model.input_names,
        output_names=[constants.PROBABILITIES_OUTPUT],
        dynamic_axes={
            **{name: {0: "batch_size"} for name in model.input_names},
            constants.PROBABILITIES_OUTPUT: {0: "batch_size"},
        },
        dynamo=False,
    )
    logger.info(f"Exported {len(model.input_names)}-input model to {output_file}")

    return output_file


def run_export(
    coefficients_path: str = typer.Argument(help="Path to the JSON coefficient table"),
    output: str = typer.Argument(default=None, help="Path to save the ONNX model"),
) -> None:
    """Run the export_to_onnx function via Typer CLI."""
    export_to_onnx(coefficients_path, output)


if __name__ == "__main__":
    typer.run(run_export)
