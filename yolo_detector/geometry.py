from typing import Sequence

import numpy as np


def area(box: Sequence[float]) -> float:
    x1, y1, x2, y2 = _xyxy(box)
    return (x2 - x1) * (y2 - y1)


def intersection_area(a: Sequence[float], b: Sequence[float]) -> float:
    ax1, ay1, ax2, ay2 = _xyxy(a)
    bx1, by1, bx2, by2 = _xyxy(b)
    inter_w = max(0.0, min(ax2, bx2) - max(ax1, bx1))
    inter_h = max(0.0, min(ay2, by2) - max(ay1, by1))
    return inter_w * inter_h


def union_area(a: Sequence[float], b: Sequence[float], intersection: float) -> float:
    return area(a) + area(b) - intersection


def iou(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Intersection-over-union of two xyxy boxes.

    Returns 0.0 when the union is empty (both boxes degenerate) instead of
    dividing by zero.
    """

    inter = intersection_area(a, b)
    union = union_area(a, b, inter)
    if union <= 0.0:
        return 0.0
    return inter / union


def iou_one_to_many(box: np.ndarray, boxes: np.ndarray) -> np.ndarray:
    """
    Vectorised IoU of one (4,) box against (K, 4) boxes, same guard as `iou`.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.float64)

    xx1 = np.maximum(box[0], boxes[:, 0])
    yy1 = np.maximum(box[1], boxes[:, 1])
    xx2 = np.minimum(box[2], boxes[:, 2])
    yy2 = np.minimum(box[3], boxes[:, 3])

    inter = np.maximum(0.0, xx2 - xx1) * np.maximum(0.0, yy2 - yy1)
    areas = (boxes[:, 2] - boxes[:, 0]) * (boxes[:, 3] - boxes[:, 1])
    union = (box[2] - box[0]) * (box[3] - box[1]) + areas - inter

    out = np.zeros(inter.shape, dtype=np.float64)
    np.divide(inter, union, out=out, where=union > 0)
    return out


def _xyxy(box: Sequence[float]):
    # Accepts BoundingBox or any (x1, y1, x2, y2, ...) sequence.
    if hasattr(box, "as_xyxy"):
        return box.as_xyxy()
    return box[0], box[1], box[2], box[3]
