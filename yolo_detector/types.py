from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    """
    One labelled box in original image pixel coordinates.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    label: str
    confidence: float

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2

    def to_list(self) -> List[Union[float, str]]:
        # Wire layout: [x1, y1, x2, y2, label, confidence]
        return [self.x1, self.y1, self.x2, self.y2, self.label, self.confidence]


# Decoder output before suppression; same shape as the final result.
Candidate = BoundingBox


@dataclass(frozen=True)
class PreparedInput:
    tensor: np.ndarray
    orig_width: int
    orig_height: int
