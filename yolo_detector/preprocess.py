from __future__ import annotations

import logging

import cv2
import numpy as np

from .errors import EmptyImageError, ImageDecodeError
from .types import PreparedInput


logger = logging.getLogger(__name__)

# Keep the stored pixel orientation; box coordinates refer to the raw pixel grid.
_IMDECODE_FLAGS = cv2.IMREAD_COLOR | cv2.IMREAD_IGNORE_ORIENTATION


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (PNG, JPEG, BMP, WebP, ...) into an RGB array.

    Alpha is dropped and grayscale is expanded to three channels.
    """

    if not data:
        raise ImageDecodeError("Image payload is empty.")

    buf = np.frombuffer(data, dtype=np.uint8)
    try:
        img = cv2.imdecode(buf, _IMDECODE_FLAGS)
    except cv2.error as exc:
        raise ImageDecodeError(f"Could not decode image: {exc}") from exc
    if img is None:
        raise ImageDecodeError("Could not decode image: unsupported or corrupt data.")

    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def resize_fill(image: np.ndarray, size: int) -> np.ndarray:
    """
    Stretch `image` to `size` x `size` without preserving aspect ratio.
    """

    h, w = image.shape[:2]
    if (w, h) == (size, size):
        return image
    return cv2.resize(image, (size, size), interpolation=cv2.INTER_LINEAR)


class TensorPreprocessor:
    """
    Turns an image into the (1, 3, S, S) float32 tensor a YOLOv8 export expects:
    RGB, values in [0, 1], channel-planar (all R, then all G, then all B).
    """

    def __init__(self, input_size: int = 640):
        if input_size < 1:
            raise ValueError("input_size must be >= 1")
        self.input_size = input_size

    def prepare(self, data: bytes) -> PreparedInput:
        return self.prepare_array(decode_image(data))

    def prepare_array(self, image_rgb: np.ndarray) -> PreparedInput:
        if image_rgb is None or not hasattr(image_rgb, "shape"):
            raise TypeError("image_rgb must be a NumPy array (RGB).")
        if image_rgb.ndim != 3 or image_rgb.shape[2] != 3:
            raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_rgb, 'shape', None)}")

        orig_h, orig_w = image_rgb.shape[:2]
        if orig_w == 0 or orig_h == 0:
            raise EmptyImageError(f"Image has zero size ({orig_w}x{orig_h}).")

        img = resize_fill(image_rgb, self.input_size)

        # normalize, HWC -> CHW, add batch
        tensor = img.astype(np.float32) / 255.0
        tensor = np.ascontiguousarray(np.transpose(tensor, (2, 0, 1))[None, ...])

        logger.debug("Prepared %dx%d image into tensor %s", orig_w, orig_h, tensor.shape)
        return PreparedInput(tensor=tensor, orig_width=int(orig_w), orig_height=int(orig_h))
