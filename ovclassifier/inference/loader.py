"""
Model loader for inference.

Handles reading OpenVINO models, reshaping them to the frame resolution
and compiling them for a compute device.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from .errors import CompileError, ModelParseError, ReshapeError
from .session import InferenceSession
from .types import LoadStatus, ModelInfo, TargetShape

logger = logging.getLogger(__name__)

# OpenVINO property names
CACHE_DIR = "CACHE_DIR"
DEVICE_PRIORITIES = "MULTI_DEVICE_PRIORITIES"
PERFORMANCE_HINT = "PERFORMANCE_HINT"
INFERENCE_PRECISION_HINT = "INFERENCE_PRECISION_HINT"


class ModelLoader:
    """Reads, reshapes and compiles models into inference sessions.

    Every step raises its own error type so the caller can decide which
    failures are fatal:

    - ``ModelParseError``: model file missing or invalid
    - ``ReshapeError``: model keeps its native shape (recoverable)
    - ``CompileError``: no compiled artifact could be produced

    Example:
        >>> loader = ModelLoader(ov.Core())
        >>> session, info, reshape_error = loader.load(
        ...     "models/classifier.xml", "CPU", TargetShape(224, 224)
        ... )
        >>> info.num_classes
        1000

    Attributes:
        cache_dir: Directory for compiled accelerator blobs
        cache_device: Device category the cache is enabled for
        virtual_device: Virtual device compiled on with the selected
                        device as priority, or None to compile directly
        performance_hint: OpenVINO performance mode
        inference_precision: OpenVINO inference precision hint
    """

    def __init__(
        self,
        core,
        cache_dir: str = "cache",
        cache_device: str = "GPU",
        virtual_device: Optional[str] = "AUTO",
        performance_hint: str = "LATENCY",
        inference_precision: str = "f32"
    ):
        self._core = core
        self.cache_dir = cache_dir
        self.cache_device = cache_device
        self.virtual_device = virtual_device or None
        self.performance_hint = performance_hint
        self.inference_precision = inference_precision

    def configure_cache(self) -> bool:
        """Enable the on-disk compilation cache for the cache device.

        Safe to call repeatedly. Skipped when no such device is present,
        since the runtime rejects properties for unknown devices.

        Returns:
            True if the cache directory was set
        """
        available = self._core.available_devices
        if not any(name.startswith(self.cache_device) for name in available):
            logger.debug(f"No {self.cache_device} device, compilation cache not set")
            return False

        try:
            self._core.set_property(self.cache_device, {CACHE_DIR: self.cache_dir})
        except RuntimeError as e:
            logger.warning(f"Could not enable compilation cache for {self.cache_device}: {e}")
            return False
        logger.debug(f"Compilation cache for {self.cache_device}: {self.cache_dir}")
        return True

    def read_model(self, model_path: Union[str, Path]):
        """Read a model graph from disk.

        Raises:
            ModelParseError: If the file is missing or cannot be parsed
        """
        model_path = Path(model_path)
        if not model_path.is_file():
            raise ModelParseError(f"Model not found: {model_path}")

        logger.info(f"Reading model from {model_path}")
        try:
            return self._core.read_model(str(model_path))
        except Exception as e:
            raise ModelParseError(f"Failed to read model {model_path}: {e}") from e

    def reshape(self, model, target_shape: TargetShape):
        """Reshape the model input to ``[1, 3, height, width]``.

        Raises:
            ReshapeError: If the model does not accept the new shape
        """
        try:
            model.reshape(target_shape.as_nchw())
        except Exception as e:
            raise ReshapeError(
                f"Model rejected input shape {target_shape.width}x{target_shape.height}: {e}"
            ) from e
        logger.info(f"Model reshaped to {target_shape.as_nchw()}")

    def compile(self, model, device: str):
        """Compile the model for ``device`` with latency and precision hints.

        Raises:
            CompileError: If the runtime fails to compile the model
        """
        config = {
            PERFORMANCE_HINT: self.performance_hint,
            INFERENCE_PRECISION_HINT: self.inference_precision,
        }
        if self.virtual_device:
            target = self.virtual_device
            config[DEVICE_PRIORITIES] = device
        else:
            target = device

        logger.info(f"Compiling model for {device} (target={target}, hint={self.performance_hint})")
        try:
            return self._core.compile_model(model, target, config)
        except Exception as e:
            raise CompileError(f"Failed to compile model for {device}: {e}") from e

    def load(
        self,
        model_path: Union[str, Path],
        device: str,
        target_shape: Optional[TargetShape] = None
    ) -> Tuple[InferenceSession, ModelInfo, Optional[ReshapeError]]:
        """Run the full read → reshape → compile → bind sequence.

        A reshape failure is logged and returned instead of raised; the
        model is then compiled at its native input shape.

        Args:
            model_path: Path to the OpenVINO IR (or ONNX) model
            device: Compute device name
            target_shape: Frame resolution, or None to keep the native shape

        Returns:
            Tuple of (session, model_info, reshape_error or None)

        Raises:
            ModelParseError: If the model cannot be read
            CompileError: If compilation or session creation fails
        """
        self.configure_cache()
        model = self.read_model(model_path)

        reshape_error = None
        if target_shape is not None:
            try:
                self.reshape(model, target_shape)
            except ReshapeError as e:
                logger.warning(f"{e}; compiling at native shape")
                reshape_error = e

        compiled_model = self.compile(model, device)

        try:
            session = InferenceSession(compiled_model)
        except Exception as e:
            raise CompileError(f"Compiled model is not usable for classification: {e}") from e

        info = ModelInfo(
            model_path=str(model_path),
            device=device,
            num_classes=session.num_classes,
            input_width=session.input_width,
            input_height=session.input_height,
            reshaped=target_shape is not None and reshape_error is None,
            status=LoadStatus.RESHAPE_SKIPPED if reshape_error else LoadStatus.OK,
        )
        logger.info(
            f"Model loaded: {info.num_classes} classes, "
            f"input {info.input_width}x{info.input_height}, device={device}"
        )
        return session, info, reshape_error


def load_class_names(labels_path: Union[str, Path]) -> Dict[int, str]:
    """Load a class index → name mapping.

    Supports a JSON list, a JSON object with integer-like keys, or a
    text file with one name per line.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    labels_path = Path(labels_path)
    if not labels_path.exists():
        raise FileNotFoundError(f"Labels file not found: {labels_path}")

    logger.info(f"Loading class names from {labels_path}")
    if labels_path.suffix.lower() == ".json":
        with open(labels_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, list):
            return {i: str(name) for i, name in enumerate(data)}
        if isinstance(data, dict):
            return {int(k): str(v) for k, v in data.items()}
        raise ValueError(f"Unexpected labels format: {type(data).__name__}")

    with open(labels_path, "r", encoding="utf-8") as f:
        names = [line.strip() for line in f if line.strip()]
    return {i: name for i, name in enumerate(names)}
