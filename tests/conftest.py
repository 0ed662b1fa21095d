from types import SimpleNamespace

import numpy as np
import pytest

from eos_upror.encoding import input_signature

COMPLETE_RECORD = {
    "age_at_insertion": 10,
    "height_pre": 120,
    "weight_pre": 25,
    "eos_type": "Congenital",
    "amb_status_preop": "Ambulatory",
    "major_cobb_angle_pre": 60,
    "minor_cobb_angle_pre": 30,
    "kyphosis_pre": 40,
    "construct_type_initial": "MCGR",
    "construct_side_initial": "Bilateral",
    "superior_attach_initial": "Spine",
    "num_superior_anchors_initial": 2,
    "inferior_attach_initial": "Pelvis",
}


class FakeSession:
    """Stand-in for an onnxruntime session returning fixed probabilities."""

    def __init__(self, probabilities=(0.73, 0.27), input_names=None, output_names=("probabilities",)) -> None:
        self.probabilities = np.array([probabilities], dtype=np.float32)
        self.input_names = list(input_names) if input_names is not None else input_signature()
        self.output_names = list(output_names)
        self.calls: list[tuple[list[str], dict[str, np.ndarray]]] = []
        self.error: Exception | None = None

    def get_inputs(self):
        return [SimpleNamespace(name=name) for name in self.input_names]

    def get_outputs(self):
        return [SimpleNamespace(name=name) for name in self.output_names]

    def run(self, output_names, feed):
        self.calls.append((output_names, feed))
        if self.error is not None:
            raise self.error
        return [self.probabilities]


class FakeSessionFactory:
    """Session factory recording how often a graph was loaded."""

    def __init__(self, session: FakeSession | None = None, error: Exception | None = None) -> None:
        self.session = session if session is not None else FakeSession()
        self.error = error
        self.loads: list[tuple[str, list[str]]] = []

    def __call__(self, model_path, providers):
        self.loads.append((model_path, list(providers)))
        if self.error is not None:
            raise self.error
        return self.session


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def complete_record():
    return dict(COMPLETE_RECORD)


@pytest.fixture()
def session_factory():
    return FakeSessionFactory()
