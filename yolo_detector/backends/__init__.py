"""
Inference engines for yolo_detector.

Engines are kept in a separate module so pre/post-processing stays usable
without importing an inference runtime. Anything with a `run(tensor)` method
returning the raw (1, 4 + C, N) output satisfies `InferenceEngine`.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


class InferenceEngine(Protocol):
    def run(self, tensor: np.ndarray) -> np.ndarray:
        ...


__all__ = ["InferenceEngine"]
