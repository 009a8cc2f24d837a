"""
Shared test configuration and an in-memory OpenVINO stand-in.

The fakes mimic the slice of the runtime the pipeline touches:
``Core.available_devices``, ``set_property``, ``read_model``,
``compile_model``, ``Model.reshape``, ``CompiledModel.output`` /
``create_infer_request`` and ``InferRequest`` tensors.
"""

import sys
from pathlib import Path
from typing import Dict, Optional, Sequence

import numpy as np
import pytest

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ovclassifier.inference import ClassifierPipeline, HostInterface
from ovclassifier.services.config import ClassifierSettings


class FakeTensor:
    """Tensor with a static shape and numpy storage."""

    def __init__(self, shape: Sequence[int], dtype=np.float32):
        self.shape = tuple(shape)
        self.data = np.zeros(self.shape, dtype=dtype)


class FakeOutput:
    def __init__(self, shape: Sequence[int]):
        self.shape = tuple(shape)


class FakeModel:
    """Model graph read from disk."""

    def __init__(
        self,
        input_shape=(1, 3, 32, 32),
        num_classes: int = 10,
        reshapable: bool = True,
        fixed_scores: Optional[Sequence[float]] = None,
        input_dtype=np.float32
    ):
        self.input_shape = tuple(input_shape)
        self.input_dtype = input_dtype
        self.num_classes = num_classes
        self.reshapable = reshapable
        self.fixed_scores = fixed_scores

    def reshape(self, shape):
        if not self.reshapable:
            raise RuntimeError("Model has a static input shape")
        self.input_shape = tuple(shape)


class FakeInferRequest:
    def __init__(self, compiled: "FakeCompiledModel"):
        self._compiled = compiled
        self.input_tensor = FakeTensor(compiled.input_shape, compiled.input_dtype)
        self.output_tensor = FakeTensor((1, compiled.num_classes))
        self.infer_count = 0

    def get_input_tensor(self, index: int = 0) -> FakeTensor:
        return self.input_tensor

    def get_output_tensor(self, index: int = 0) -> FakeTensor:
        return self.output_tensor

    def infer(self):
        if self._compiled.fail_infer:
            raise RuntimeError("Device lost")
        self.infer_count += 1
        self.output_tensor.data[0, :] = self._compiled.forward(self.input_tensor.data)


class FakeCompiledModel:
    """Deterministic linear classifier over per-channel means."""

    def __init__(self, model: FakeModel, device: str, config: Dict):
        self.input_shape = model.input_shape
        self.input_dtype = model.input_dtype
        self.num_classes = model.num_classes
        self.fixed_scores = model.fixed_scores
        self.device = device
        self.config = dict(config)
        self.fail_infer = False
        self.requests = []
        rng = np.random.default_rng(0)
        self.weights = rng.standard_normal((self.num_classes, 3)).astype(np.float32)

    def output(self, index: int = 0) -> FakeOutput:
        return FakeOutput((1, self.num_classes))

    def create_infer_request(self) -> FakeInferRequest:
        request = FakeInferRequest(self)
        self.requests.append(request)
        return request

    def forward(self, x: np.ndarray) -> np.ndarray:
        if self.fixed_scores is not None:
            return np.asarray(self.fixed_scores, dtype=np.float32)
        channel_means = x.reshape(3, -1).mean(axis=1)
        return self.weights @ channel_means


class FakeCore:
    """Stand-in for ``openvino.Core``."""

    def __init__(self, devices=("CPU", "GPU", "GNA")):
        self.available_devices = list(devices)
        self.properties: Dict[str, Dict] = {}
        self.models: Dict[str, Dict] = {}
        self.compiled = []
        self.fail_compile = False

    def register_model(self, path: Path, **model_kwargs) -> Path:
        """Create a model file on disk that read_model will accept."""
        path = Path(path)
        path.write_text("<net/>", encoding="utf-8")
        self.models[str(path)] = model_kwargs
        return path

    def set_property(self, device: str, properties: Dict):
        self.properties.setdefault(device, {}).update(properties)

    def read_model(self, path: str) -> FakeModel:
        if path not in self.models:
            raise RuntimeError(f"Unable to read the model: {path}")
        return FakeModel(**self.models[path])

    def compile_model(self, model: FakeModel, device: str, config: Dict) -> FakeCompiledModel:
        if self.fail_compile:
            raise RuntimeError(f"Failed to compile for {device}")
        compiled = FakeCompiledModel(model, device, config)
        self.compiled.append(compiled)
        return compiled


def make_frame(width: int, height: int, rgba=(128, 128, 128, 255)) -> bytes:
    """Solid-color RGBA frame as raw bytes."""
    frame = np.empty((height, width, 4), dtype=np.uint8)
    frame[:] = rgba
    return frame.tobytes()


@pytest.fixture
def fake_core():
    """Fake runtime exposing CPU, GPU and a GNA device."""
    return FakeCore()


@pytest.fixture
def settings():
    """Default pipeline settings."""
    return ClassifierSettings()


@pytest.fixture
def model_file(tmp_path, fake_core):
    """A reshapable 10-class model."""
    return fake_core.register_model(tmp_path / "model.xml")


@pytest.fixture
def static_model_file(tmp_path, fake_core):
    """A 5-class model fixed at 16x16 input."""
    return fake_core.register_model(
        tmp_path / "static.xml",
        input_shape=(1, 3, 16, 16),
        num_classes=5,
        reshapable=False
    )


@pytest.fixture
def pipeline(fake_core, settings):
    """Pipeline over the fake runtime, devices enumerated."""
    pipeline = ClassifierPipeline(core=fake_core, settings=settings)
    pipeline.list_devices()
    return pipeline


@pytest.fixture
def host(pipeline):
    """Host interface over the fake pipeline."""
    return HostInterface(pipeline)


@pytest.fixture
def core_factory():
    """Build fake runtimes with a custom device registry."""
    return FakeCore


@pytest.fixture
def frame_factory():
    """Build solid-color RGBA frames."""
    return make_frame
