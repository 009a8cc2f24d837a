"""
Frame preprocessing.

Converts interleaved 8-bit RGBA frames into the planar, normalized
float32 layout expected by the model input tensor.
"""

import logging
from typing import Optional, Union

import cv2
import numpy as np

from .errors import ShapeMismatch
from .types import NUM_CHANNELS, RAW_CHANNELS

logger = logging.getLogger(__name__)

RawFrame = Union[bytes, bytearray, memoryview, np.ndarray]


def to_pixel_array(raw_frame: RawFrame) -> np.ndarray:
    """Flat uint8 view of a raw frame buffer, without copying."""
    if isinstance(raw_frame, np.ndarray):
        if raw_frame.dtype != np.uint8:
            raise TypeError(f"Raw frame must be uint8, got {raw_frame.dtype}")
        return raw_frame.reshape(-1)
    return np.frombuffer(raw_frame, dtype=np.uint8)


def preprocess_frame(
    raw_frame: RawFrame,
    width: int,
    height: int,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """Drop alpha and write the frame as planar floats in [0, 1].

    For every pixel ``p`` and channel ``ch`` in RGB::

        out[ch, p] = raw_frame[p * 4 + ch] / 255.0

    The division happens in float32 so identical frames always produce
    bit-identical tensors.

    Args:
        raw_frame: Row-major RGBA buffer of ``width * height`` pixels
        width: Frame width in pixels
        height: Frame height in pixels
        out: Optional ``(3, width * height)`` float32 destination, usually
             the session input view

    Returns:
        The filled ``(3, width * height)`` array (``out`` if given)

    Raises:
        ShapeMismatch: If the buffer or destination size does not match
                       ``width x height``
    """
    n_pixels = width * height
    pixels = to_pixel_array(raw_frame)

    expected = n_pixels * RAW_CHANNELS
    if pixels.size != expected:
        raise ShapeMismatch(
            f"Frame has {pixels.size} bytes, expected {expected} "
            f"for {width}x{height} RGBA"
        )

    if out is None:
        out = np.empty((NUM_CHANNELS, n_pixels), dtype=np.float32)
    elif out.shape != (NUM_CHANNELS, n_pixels):
        raise ShapeMismatch(
            f"Destination shape {out.shape} does not match "
            f"{(NUM_CHANNELS, n_pixels)}"
        )

    rgba = np.ascontiguousarray(pixels.reshape(height, width, RAW_CHANNELS))
    if not rgba.flags.writeable:
        # OpenCV rejects read-only buffers such as np.frombuffer(bytes)
        rgba = rgba.copy()
    rgb = cv2.cvtColor(rgba, cv2.COLOR_RGBA2RGB)

    # HWC interleaved -> CHW planar
    planar = rgb.reshape(n_pixels, NUM_CHANNELS).T.astype(np.float32)
    np.divide(planar, 255.0, out=out)
    return out


def image_to_rgba(image: np.ndarray) -> np.ndarray:
    """Convert an OpenCV image (gray, BGR or BGRA) to RGBA."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    raise ValueError(f"Unsupported image shape: {image.shape}")
