"""
Inference session over a compiled model.

Owns one infer request, a writable planar view over its input tensor
and the output length. Created once per successful load and reused by
every frame until the next load replaces it.
"""

import logging
from typing import Optional

import numpy as np

from .errors import InferenceRuntimeError, UninitializedSession
from .types import NUM_CHANNELS

logger = logging.getLogger(__name__)


class InferenceSession:
    """Execution context plus bound input buffer for one compiled model.

    The input view borrows the backend tensor storage. It is valid until
    ``close()`` is called, which the pipeline does when a new load
    replaces this session.

    Example:
        >>> session = InferenceSession(compiled_model)
        >>> session.input_view[:] = planar_frame   # (3, width * height)
        >>> scores = session.run()

    Attributes:
        num_classes: Number of output scores
        input_width: Width of the bound input tensor
        input_height: Height of the bound input tensor
    """

    def __init__(self, compiled_model):
        """Create the infer request and bind the input tensor.

        Args:
            compiled_model: OpenVINO ``CompiledModel`` with one NCHW float
                            input and one ``[1, num_classes]`` output

        Raises:
            InferenceRuntimeError: If the input tensor is not f32 or cannot
                                   be viewed in place as ``(channels, pixels)``
        """
        self.num_classes = int(compiled_model.output(0).shape[1])

        self._request = compiled_model.create_infer_request()
        input_tensor = self._request.get_input_tensor(0)

        shape = input_tensor.shape
        self.input_height = int(shape[2])
        self.input_width = int(shape[3])

        data = input_tensor.data
        if data.dtype != np.float32:
            raise InferenceRuntimeError(
                f"Input tensor must be f32, model expects {data.dtype}"
            )
        planar = data.reshape(NUM_CHANNELS, self.n_pixels)
        if not np.shares_memory(planar, data):
            raise InferenceRuntimeError("Input tensor storage is not contiguous")
        self._input_view: Optional[np.ndarray] = planar

        logger.debug(
            f"Session bound: input {self.input_width}x{self.input_height}, "
            f"{self.num_classes} classes"
        )

    @property
    def n_pixels(self) -> int:
        return self.input_width * self.input_height

    @property
    def closed(self) -> bool:
        return self._input_view is None

    @property
    def input_view(self) -> np.ndarray:
        """Writable ``(3, n_pixels)`` float view over the input tensor."""
        if self._input_view is None:
            raise UninitializedSession("Session has been released")
        return self._input_view

    def run(self) -> np.ndarray:
        """Run a synchronous forward pass on the bound input.

        Returns:
            Flat score vector of length ``num_classes``
        """
        if self._request is None:
            raise UninitializedSession("Session has been released")

        self._request.infer()

        # The model has exactly one output
        output = self._request.get_output_tensor(0).data
        return np.asarray(output).reshape(-1)[:self.num_classes]

    def close(self):
        """Release the request and invalidate the input view."""
        self._input_view = None
        self._request = None
