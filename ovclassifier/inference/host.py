"""
Host-facing boundary of the pipeline.

Exposes the four operations an embedding host calls, with plain
integer/string results. No call ever raises: load failures map to
status codes, frame failures to negative sentinels.
"""

import logging
import operator
import os
from typing import Optional, Sequence

from .errors import CompileError, DeviceIndexOutOfRange
from .pipeline import ClassifierPipeline
from .preprocessing import RawFrame
from .types import LoadStatus, TargetShape

logger = logging.getLogger(__name__)


class HostInterface:
    """Integer-coded facade over one ``ClassifierPipeline``.

    ``load_model`` codes:

    - ``0``: loaded and reshaped
    - ``1``: model path invalid or unreadable; previous session kept
    - ``2``: reshape rejected, compiled at the native shape
    - ``3``: compilation failed; previous session kept
    - ``4``: device index not an integer in range; previous session kept
    - ``5``: input dimensions are not two positive integers

    ``perform_inference`` returns a class index ``>= 0``, ``-1`` before
    any successful load, or ``-2`` if the frame could not be processed.

    Example:
        >>> host = HostInterface()
        >>> host.get_device_count()
        2
        >>> host.load_model("model.xml", 0, (224, 224))
        0
        >>> host.perform_inference(rgba_bytes)
        283
    """

    def __init__(self, pipeline: Optional[ClassifierPipeline] = None):
        self.pipeline = pipeline or ClassifierPipeline()

    def get_device_count(self) -> int:
        """Rebuild the device list and return its size."""
        return len(self.pipeline.list_devices())

    def get_device_name(self, index: int) -> Optional[str]:
        """Name of a device from the last enumeration, None if stale."""
        try:
            return self.pipeline.device_name_at(operator.index(index))
        except (DeviceIndexOutOfRange, TypeError) as e:
            logger.warning(f"No device at index {index!r}: {e}")
            return None

    def load_model(
        self,
        model_path: str,
        device_index: int,
        input_dims: Optional[Sequence[int]] = None
    ) -> int:
        """Load a model for the device at ``device_index``.

        Args:
            model_path: Path to the model file
            device_index: Index from the last enumeration
            input_dims: ``[width, height]`` of the host frames

        Returns:
            Status code, see class docstring
        """
        if not isinstance(model_path, (str, os.PathLike)):
            logger.error(f"Model path must be a string, got {type(model_path).__name__}")
            return int(LoadStatus.PARSE_FAILED)

        try:
            device_index = operator.index(device_index)
        except TypeError:
            logger.error(f"Device index must be an integer, got {device_index!r}")
            return int(LoadStatus.DEVICE_OUT_OF_RANGE)

        target_shape = None
        if input_dims is not None:
            try:
                width, height = input_dims
                # Integer types only, floats and strings are not truncated
                target_shape = TargetShape(operator.index(width), operator.index(height))
            except (TypeError, ValueError) as e:
                logger.error(f"Invalid input dimensions {input_dims!r}: {e}")
                return int(LoadStatus.INVALID_INPUT_DIMS)

        try:
            outcome = self.pipeline.load_model(model_path, device_index, target_shape)
        except DeviceIndexOutOfRange as e:
            logger.error(f"Model load failed: {e}")
            return int(LoadStatus.DEVICE_OUT_OF_RANGE)
        except CompileError as e:
            logger.error(f"Model load failed: {e}")
            return int(LoadStatus.COMPILE_FAILED)
        return int(outcome.status)

    def perform_inference(self, raw_frame: RawFrame) -> int:
        """Classify one RGBA frame and return the class index or sentinel."""
        return self.pipeline.classify(raw_frame).class_index
