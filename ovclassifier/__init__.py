"""
ovclassifier: embeddable OpenVINO image classification.

Usage:
    >>> from ovclassifier import ClassifierPipeline, TargetShape
    >>>
    >>> pipeline = ClassifierPipeline()
    >>> devices = pipeline.list_devices()
    >>> pipeline.load_model("model.xml", devices.index("CPU"), TargetShape(224, 224))
    >>> result = pipeline.classify(rgba_frame)
    >>> print(result.class_index)
"""

from .inference import (
    ClassifierPipeline,
    HostInterface,
    TargetShape,
    LoadStatus,
    ClassificationResult,
)

__version__ = "0.1.0"

__all__ = [
    "ClassifierPipeline",
    "HostInterface",
    "TargetShape",
    "LoadStatus",
    "ClassificationResult",
]
