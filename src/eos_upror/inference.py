from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

import anyio
import numpy as np
import onnxruntime as ort
from loguru import logger

from eos_upror import constants
from eos_upror.encoding import input_signature
from eos_upror.errors import InferenceError, ModelLoadError
from eos_upror.settings import Settings

SessionFactory = Callable[[str, Sequence[str]], Any]


class InvokerState(str, Enum):
    """Lifecycle of the inference invoker."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    RUNNING = "running"
    FAILED = "failed"


def create_session(model_path: str, providers: Sequence[str]) -> ort.InferenceSession:
    """Create an onnxruntime session for the given graph."""
    return ort.InferenceSession(model_path, providers=list(providers))


class InferenceInvoker:
    """Loads the UPROR inference graph once and runs it on encoded inputs.

    The blocking onnxruntime calls run in worker threads so the caller's event
    loop stays responsive. Loading is memoized: concurrent ``ensure_loaded``
    calls from any task or thread share a single load. A failed load or run
    moves the invoker to ``FAILED`` until ``reset`` is called.

    Args:
        model_path: Location of the ONNX graph.
        providers: onnxruntime execution providers.
        output_name: Name of the probability output.
        positive_class_index: Column of the positive class in the output.
        verify_input_signature: Reject graphs whose inputs differ from the encoder slots.
        expected_inputs: Input names the graph must declare. Defaults to the encoder signature.
        session_factory: Callable creating the session, mainly for tests.

    Example:
        >>> invoker = InferenceInvoker("models/upror_growing.onnx")
        >>> await invoker.ensure_loaded()
        >>> probability = await invoker.run(encode(validated_record))
    """

    def __init__(
        self,
        model_path: str,
        providers: Sequence[str] = ("CPUExecutionProvider",),
        *,
        output_name: str = constants.PROBABILITIES_OUTPUT,
        positive_class_index: int = constants.POSITIVE_CLASS_INDEX,
        verify_input_signature: bool = True,
        expected_inputs: Sequence[str] | None = None,
        session_factory: SessionFactory = create_session,
    ) -> None:
        self.model_path = str(model_path)
        self.providers = list(providers)
        self.output_name = output_name
        self.positive_class_index = positive_class_index
        self.verify_input_signature = verify_input_signature
        self.expected_inputs = list(expected_inputs) if expected_inputs is not None else input_signature()
        self._session_factory = session_factory

        self._session: Any = None
        self._state = InvokerState.UNINITIALIZED
        self._in_flight = 0
        self._load_lock = threading.Lock()
        self._state_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "InferenceInvoker":
        """Build an invoker from the calculator settings."""
        return cls(
            settings.model_path,
            settings.providers,
            output_name=settings.output_name,
            positive_class_index=settings.positive_class_index,
            verify_input_signature=settings.verify_input_signature,
            **kwargs,
        )

    @property
    def state(self) -> InvokerState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._session is not None and self._state in (InvokerState.READY, InvokerState.RUNNING)

    async def ensure_loaded(self) -> None:
        """Load the inference graph unless it is already loaded.

        Raises:
            ModelLoadError: If loading fails or a previous failure was not reset.
            InferenceError: If a previous run failed and the invoker was not reset.
        """
        if self.is_loaded:
            return
        if self._state is InvokerState.FAILED:
            if self._session is not None:
                raise InferenceError("Inference run failed earlier; call reset() before retrying.")
            raise ModelLoadError("Inference invoker is in a failed state; call reset() before retrying.")
        await anyio.to_thread.run_sync(self._load_blocking)

    def _load_blocking(self) -> None:
        with self._load_lock:
            if self._session is not None:
                return
            if self._state is InvokerState.FAILED:
                raise ModelLoadError("Inference invoker is in a failed state; call reset() before retrying.")

            self._state = InvokerState.LOADING
            logger.info(f"Loading inference graph from {self.model_path}")
            start = time.perf_counter()
            try:
                session = self._session_factory(self.model_path, self.providers)
                self._check_signature(session)
            except ModelLoadError as exc:
                self._state = InvokerState.FAILED
                logger.error(f"Rejected inference graph at {self.model_path}: {exc}")
                raise
            except Exception as exc:
                self._state = InvokerState.FAILED
                logger.error(f"Failed to load inference graph from {self.model_path}: {exc}")
                raise ModelLoadError(f"Could not load model from {self.model_path}: {exc}") from exc

            self._session = session
            self._state = InvokerState.READY
            logger.info(f"Inference graph ready (loading time: {time.perf_counter() - start:.2f}s)")

    def _check_signature(self, session: Any) -> None:
        output_names = [node.name for node in session.get_outputs()]
        if self.output_name not in output_names:
            raise ModelLoadError(f"Model has no output named '{self.output_name}' (outputs: {output_names}).")

        if not self.verify_input_signature:
            return

        declared = {node.name for node in session.get_inputs()}
        expected = set(self.expected_inputs)
        missing = sorted(expected - declared)
        unexpected = sorted(declared - expected)
        if missing or unexpected:
            raise ModelLoadError(
                f"Model inputs do not match the encoded features. Missing: {missing}, unexpected: {unexpected}"
            )

    async def run(self, tensors: Mapping[str, np.ndarray]) -> float:
        """Run the graph and return the positive-class probability.

        Args:
            tensors: Encoded inputs keyed by input name.

        Returns:
            Probability of the positive class.

        Raises:
            InferenceError: If the graph is not loaded or the run fails.
        """
        session = self._require_session()
        with self._state_lock:
            self._in_flight += 1
            self._state = InvokerState.RUNNING
        try:
            return await anyio.to_thread.run_sync(self._run_blocking, session, dict(tensors))
        except InferenceError:
            self._state = InvokerState.FAILED
            raise
        finally:
            with self._state_lock:
                self._in_flight -= 1
                if self._in_flight == 0 and self._state is InvokerState.RUNNING:
                    self._state = InvokerState.READY

    def _require_session(self) -> Any:
        if self._state is InvokerState.FAILED:
            raise InferenceError("Inference invoker is in a failed state; call reset() before retrying.")
        if self._session is None:
            raise InferenceError("Model is not loaded; await ensure_loaded() first.")
        return self._session

    def _run_blocking(self, session: Any, tensors: dict[str, np.ndarray]) -> float:
        start = time.perf_counter()
        try:
            outputs = session.run([self.output_name], tensors)
            probabilities = np.asarray(outputs[0], dtype=np.float64).reshape(-1)
            probability = float(probabilities[self.positive_class_index])
        except Exception as exc:
            logger.error(f"Error running inference graph: {exc}")
            raise InferenceError(f"Inference failed: {exc}") from exc

        logger.debug(f"Inference completed in {(time.perf_counter() - start) * 1000:.2f}ms")
        return probability

    async def predict(self, tensors: Mapping[str, np.ndarray]) -> float:
        """Load the graph if needed, then run it."""
        await self.ensure_loaded()
        return await self.run(tensors)

    def reset(self) -> None:
        """Drop the loaded graph so the next call loads it from scratch."""
        with self._load_lock:
            if self._state is InvokerState.FAILED:
                logger.info("Resetting failed inference invoker")
            self._session = None
            self._state = InvokerState.UNINITIALIZED
