"""
Inference pipeline for ovclassifier.

Device enumeration, model loading and compilation, frame
preprocessing, execution and best-class extraction.

Usage:
    >>> from ovclassifier.inference import ClassifierPipeline, TargetShape
    >>>
    >>> pipeline = ClassifierPipeline()
    >>> pipeline.list_devices()
    ['CPU', 'GPU']
    >>> outcome = pipeline.load_model("model.xml", 0, TargetShape(224, 224))
    >>> result = pipeline.classify(rgba_frame)

Or through the integer-coded host boundary:
    >>> from ovclassifier.inference import HostInterface
    >>> host = HostInterface()
    >>> host.load_model("model.xml", 0, [224, 224])
    0
"""

from .types import (
    UNINITIALIZED_SENTINEL,
    RUNTIME_ERROR_SENTINEL,
    PipelineState,
    LoadStatus,
    TargetShape,
    ModelInfo,
    LoadOutcome,
    ClassificationResult,
    InferenceStats,
)

from .errors import (
    ClassifierError,
    DeviceIndexOutOfRange,
    ModelParseError,
    ReshapeError,
    CompileError,
    ShapeMismatch,
    UninitializedSession,
    InferenceRuntimeError,
)

from .devices import DeviceEnumerator
from .loader import ModelLoader, load_class_names
from .session import InferenceSession
from .preprocessing import preprocess_frame, image_to_rgba
from .postprocessing import best_class, top_k
from .pipeline import ClassifierPipeline
from .host import HostInterface


__all__ = [
    # Types
    "UNINITIALIZED_SENTINEL",
    "RUNTIME_ERROR_SENTINEL",
    "PipelineState",
    "LoadStatus",
    "TargetShape",
    "ModelInfo",
    "LoadOutcome",
    "ClassificationResult",
    "InferenceStats",
    # Errors
    "ClassifierError",
    "DeviceIndexOutOfRange",
    "ModelParseError",
    "ReshapeError",
    "CompileError",
    "ShapeMismatch",
    "UninitializedSession",
    "InferenceRuntimeError",
    # Stages
    "DeviceEnumerator",
    "ModelLoader",
    "load_class_names",
    "InferenceSession",
    "preprocess_frame",
    "image_to_rgba",
    "best_class",
    "top_k",
    # Controller
    "ClassifierPipeline",
    "HostInterface",
]
