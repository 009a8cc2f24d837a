"""
Type definitions for the classification pipeline.

Provides the value types exchanged between the loader, the session
and the host boundary.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Deque, Dict, Optional


# Returned by a classification request made before any successful load
UNINITIALIZED_SENTINEL = -1
# Returned when preprocessing, execution or output readback fails
RUNTIME_ERROR_SENTINEL = -2

# Color channels fed to the model (alpha is dropped)
NUM_CHANNELS = 3
# Channels in the raw frames supplied by the host (RGBA)
RAW_CHANNELS = 4


class PipelineState(str, Enum):
    """Whether a usable inference session exists."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class LoadStatus(IntEnum):
    """Status codes reported by a model load.

    ``OK`` and ``RESHAPE_SKIPPED`` are the two success codes; the
    others leave any previous session untouched.
    """
    OK = 0
    PARSE_FAILED = 1
    RESHAPE_SKIPPED = 2
    COMPILE_FAILED = 3
    DEVICE_OUT_OF_RANGE = 4
    INVALID_INPUT_DIMS = 5

    @property
    def succeeded(self) -> bool:
        return self in (LoadStatus.OK, LoadStatus.RESHAPE_SKIPPED)


@dataclass(frozen=True)
class TargetShape:
    """Desired input resolution of the model.

    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels

    Example:
        >>> TargetShape(224, 224).as_nchw()
        [1, 3, 224, 224]
    """
    width: int
    height: int

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int, got {type(value).__name__}")
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    @property
    def n_pixels(self) -> int:
        return self.width * self.height

    def as_nchw(self):
        """Shape passed to the backend reshape: batch 1, RGB, height, width."""
        return [1, NUM_CHANNELS, self.height, self.width]


@dataclass
class ModelInfo:
    """Information about the loaded model.

    Attributes:
        model_path: Path the model was read from
        device: Compute device the model was compiled for
        num_classes: Length of the output score vector
        input_width: Width of the bound input tensor
        input_height: Height of the bound input tensor
        reshaped: False when the model kept its native input shape
        status: Status code reported by the load
    """
    model_path: str
    device: str
    num_classes: int
    input_width: int
    input_height: int
    reshaped: bool = True
    status: LoadStatus = LoadStatus.OK

    @property
    def n_pixels(self) -> int:
        return self.input_width * self.input_height

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "model_path": self.model_path,
            "device": self.device,
            "num_classes": self.num_classes,
            "input_width": self.input_width,
            "input_height": self.input_height,
            "reshaped": self.reshaped,
            "status": int(self.status),
        }


@dataclass
class LoadOutcome:
    """Discriminated result of a model load.

    Attributes:
        status: Status code, see ``LoadStatus``
        model_info: Info about the new session, None if the load failed
        error: The error that caused a failure or a degraded success
    """
    status: LoadStatus
    model_info: Optional[ModelInfo] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.status.succeeded


@dataclass
class ClassificationResult:
    """Result of classifying one frame.

    ``class_index`` is in ``[0, num_classes)`` on success, otherwise one
    of the negative sentinels. ``error_kind`` names the failing error
    class so that failures with the same sentinel stay distinguishable.
    """
    class_index: int
    error_kind: Optional[str] = None
    latency_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.class_index >= 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "class_index": self.class_index,
            "error_kind": self.error_kind,
            "latency_ms": self.latency_ms,
        }


@dataclass
class InferenceStats:
    """Rolling per-frame latency statistics for one session."""
    frames: int = 0
    failures: int = 0
    last_latency_ms: float = 0.0
    latencies_ms: Deque[float] = field(default_factory=lambda: deque(maxlen=100))

    def record(self, latency_ms: float, failed: bool = False):
        self.frames += 1
        if failed:
            self.failures += 1
            return
        self.last_latency_ms = latency_ms
        self.latencies_ms.append(latency_ms)

    @property
    def mean_latency_ms(self) -> float:
        if not self.latencies_ms:
            return 0.0
        return sum(self.latencies_ms) / len(self.latencies_ms)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "frames": self.frames,
            "failures": self.failures,
            "last_latency_ms": self.last_latency_ms,
            "mean_latency_ms": self.mean_latency_ms,
        }
