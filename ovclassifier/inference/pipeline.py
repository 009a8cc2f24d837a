"""
Classification pipeline controller.

Owns the device list, the current inference session and the pipeline
state. Loads replace the session atomically; frames flow through
preprocessing → session → postprocessing.
"""

import logging
import threading
import time
from typing import List, Optional, Tuple, Union

import numpy as np
import openvino as ov

from ..services.config import ClassifierSettings
from .devices import DeviceEnumerator
from .errors import (
    ClassifierError,
    InferenceRuntimeError,
    ModelParseError,
    ShapeMismatch,
    UninitializedSession,
)
from .loader import ModelLoader
from .postprocessing import best_class
from .preprocessing import RawFrame, preprocess_frame
from .session import InferenceSession
from .types import (
    RUNTIME_ERROR_SENTINEL,
    UNINITIALIZED_SENTINEL,
    ClassificationResult,
    InferenceStats,
    LoadOutcome,
    LoadStatus,
    ModelInfo,
    PipelineState,
    TargetShape,
)

logger = logging.getLogger(__name__)


class ClassifierPipeline:
    """Single-model image classification pipeline.

    State machine:

    - ``UNINITIALIZED → READY`` only when a load fully succeeds (reshape
      may be skipped); a failed load keeps the previous state and session.
    - ``READY → READY`` when a later load succeeds; the old session is
      closed after the new one is in place.
    - Classification never changes the state.

    Loads and classifications are serialized by an internal lock, so a
    host thread cannot swap the session out from under a running frame.

    Example:
        >>> pipeline = ClassifierPipeline()
        >>> pipeline.list_devices()
        ['CPU', 'GPU']
        >>> outcome = pipeline.load_model("model.xml", 0, TargetShape(224, 224))
        >>> outcome.status
        <LoadStatus.OK: 0>
        >>> pipeline.classify(rgba_bytes).class_index
        283
    """

    def __init__(
        self,
        core=None,
        settings: Optional[ClassifierSettings] = None
    ):
        """Initialize the pipeline.

        Args:
            core: OpenVINO ``Core``; a new one is created if None
            settings: Pipeline settings, defaults if None
        """
        self.settings = settings or ClassifierSettings()
        self._core = core if core is not None else ov.Core()

        self.devices = DeviceEnumerator(self._core, excluded=self.settings.excluded_device)
        self.loader = ModelLoader(
            self._core,
            cache_dir=self.settings.cache_dir,
            cache_device=self.settings.cache_device,
            virtual_device=self.settings.virtual_device,
            performance_hint=self.settings.performance_hint,
            inference_precision=self.settings.inference_precision,
        )

        self._session: Optional[InferenceSession] = None
        self._model_info: Optional[ModelInfo] = None
        self._last_scores: Optional[np.ndarray] = None
        self._lock = threading.RLock()
        self.stats = InferenceStats()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        if self._session is None:
            return PipelineState.UNINITIALIZED
        return PipelineState.READY

    @property
    def is_ready(self) -> bool:
        return self.state is PipelineState.READY

    @property
    def last_scores(self) -> Optional[np.ndarray]:
        """Copy of the output scores of the last executed frame."""
        return self._last_scores

    @property
    def model_info(self) -> Optional[ModelInfo]:
        """Info about the current session, None before the first load."""
        return self._model_info

    # ------------------------------------------------------------------
    # Devices
    # ------------------------------------------------------------------

    def list_devices(self) -> List[str]:
        """Rebuild and return the usable device list."""
        return self.devices.list_devices()

    def device_name_at(self, index: int) -> str:
        """Device name from the last enumeration.

        Raises:
            DeviceIndexOutOfRange: If ``index`` is stale or invalid
        """
        return self.devices.device_name_at(index)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_model(
        self,
        model_path: str,
        device_index: int,
        target_shape: Optional[Union[TargetShape, Tuple[int, int]]] = None
    ) -> LoadOutcome:
        """Load, reshape and compile a model, replacing the current session.

        Args:
            model_path: Path to the model file
            device_index: Index into the last enumerated device list
            target_shape: ``TargetShape`` or ``(width, height)``; None keeps
                          the model's native input shape

        Returns:
            LoadOutcome with ``OK``, ``RESHAPE_SKIPPED`` or ``PARSE_FAILED``

        Raises:
            DeviceIndexOutOfRange: If ``device_index`` is invalid
            CompileError: If compilation fails; the previous session is kept
        """
        if isinstance(target_shape, tuple):
            target_shape = TargetShape(*target_shape)

        device = self.devices.device_name_at(device_index)

        try:
            session, info, reshape_error = self.loader.load(model_path, device, target_shape)
        except ModelParseError as e:
            logger.error(f"Model load failed: {e}")
            return LoadOutcome(status=LoadStatus.PARSE_FAILED, error=e)

        with self._lock:
            previous = self._session
            self._session = session
            self._model_info = info
            self.stats = InferenceStats()
            self._last_scores = None
            if previous is not None:
                previous.close()

        logger.info(f"Pipeline ready on {device} (status={info.status.name})")
        return LoadOutcome(status=info.status, model_info=info, error=reshape_error)

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def _require_session(self) -> InferenceSession:
        if self._session is None:
            raise UninitializedSession("No model has been loaded")
        return self._session

    def preprocess(
        self,
        raw_frame: RawFrame,
        width: Optional[int] = None,
        height: Optional[int] = None
    ):
        """Write an RGBA frame into the session input tensor.

        Raises:
            UninitializedSession: If no model is loaded
            ShapeMismatch: If the frame size differs from the session input
        """
        with self._lock:
            session = self._require_session()
            width = session.input_width if width is None else width
            height = session.input_height if height is None else height
            if (width, height) != (session.input_width, session.input_height):
                raise ShapeMismatch(
                    f"Frame is {width}x{height}, session expects "
                    f"{session.input_width}x{session.input_height}"
                )
            preprocess_frame(raw_frame, width, height, out=session.input_view)

    def infer(self) -> int:
        """Run the model on the bound input and return the best class.

        Raises:
            UninitializedSession: If no model is loaded
            InferenceRuntimeError: If execution or output readback fails
        """
        with self._lock:
            session = self._require_session()
            try:
                scores = session.run()
                self._last_scores = np.array(scores, dtype=np.float32)
                return best_class(scores)
            except ClassifierError:
                raise
            except Exception as e:
                raise InferenceRuntimeError(f"Forward pass failed: {e}") from e

    def classify(self, raw_frame: RawFrame) -> ClassificationResult:
        """Preprocess, infer and postprocess one frame.

        Never raises. Before any successful load the result carries
        ``UNINITIALIZED_SENTINEL`` and nothing is recorded; any failure
        while handling the frame yields ``RUNTIME_ERROR_SENTINEL``.
        """
        with self._lock:
            if self._session is None:
                return ClassificationResult(
                    class_index=UNINITIALIZED_SENTINEL,
                    error_kind=UninitializedSession.__name__,
                )

            start = time.perf_counter()
            try:
                self.preprocess(raw_frame)
                class_index = self.infer()
            except Exception as e:
                latency_ms = (time.perf_counter() - start) * 1000
                self.stats.record(latency_ms, failed=True)
                logger.error(f"Inference failed: {e}")
                return ClassificationResult(
                    class_index=RUNTIME_ERROR_SENTINEL,
                    error_kind=type(e).__name__,
                    latency_ms=latency_ms,
                )

            latency_ms = (time.perf_counter() - start) * 1000
            self.stats.record(latency_ms)
            logger.debug(f"Frame classified as {class_index} in {latency_ms:.2f} ms")
            return ClassificationResult(class_index=class_index, latency_ms=latency_ms)

    def close(self):
        """Release the current session and return to UNINITIALIZED."""
        with self._lock:
            if self._session is not None:
                self._session.close()
            self._session = None
            self._model_info = None
            self._last_scores = None
