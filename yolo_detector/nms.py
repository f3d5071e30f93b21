from dataclasses import dataclass
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import iou_one_to_many
from .types import BoundingBox, Candidate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NMSConfig:
    iou_threshold: float = 0.7
    # None keeps every surviving box.
    max_detections: Optional[int] = None
    # If False, suppression only happens between boxes of the same label.
    class_agnostic: bool = True


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Greedy NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of boxes to keep, highest score first.

    Equal scores keep their input order. A box is dropped when its IoU with an
    already kept box is >= `iou_threshold`.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int64)

    order = np.argsort(-scores, kind="stable")
    keep: List[int] = []

    while order.size > 0:
        if cfg.max_detections is not None and len(keep) >= cfg.max_detections:
            break
        i = order[0]
        keep.append(int(i))

        rest = order[1:]
        overlap = iou_one_to_many(boxes[i], boxes[rest])
        order = rest[overlap < cfg.iou_threshold]

    return np.array(keep, dtype=np.int64)


class NonMaxSuppressor:
    """
    Reduces overlapping candidates to the final result set.

    Class-agnostic by default: a confident "cat" box suppresses an overlapping
    "dog" box. Set `class_agnostic=False` to suppress within each label only.
    """

    def __init__(self, cfg: NMSConfig = NMSConfig()):
        self.cfg = cfg

    def suppress(self, candidates: Sequence[Candidate]) -> List[BoundingBox]:
        if not candidates:
            return []

        boxes, scores = _pack(candidates)
        if self.cfg.class_agnostic:
            keep_idx = nms(boxes, scores, self.cfg).tolist()
        else:
            keep_idx = self._per_label(candidates, boxes, scores)

        kept = [candidates[i] for i in keep_idx]
        logger.debug("NMS kept %d of %d candidates", len(kept), len(candidates))
        return kept

    def _per_label(self, candidates: Sequence[Candidate], boxes: np.ndarray, scores: np.ndarray) -> List[int]:
        groups: Dict[str, List[int]] = {}
        for idx, cand in enumerate(candidates):
            groups.setdefault(cand.label, []).append(idx)

        kept: List[int] = []
        for idx in groups.values():
            idx_arr = np.array(idx, dtype=np.int64)
            keep_local = nms(boxes[idx_arr], scores[idx_arr], self.cfg)
            kept.extend(idx_arr[keep_local].tolist())

        # Merge by score; ties fall back to input order.
        kept.sort(key=lambda i: (-scores[i], i))
        if self.cfg.max_detections is not None:
            kept = kept[: self.cfg.max_detections]
        return kept


def _pack(candidates: Sequence[Candidate]) -> Tuple[np.ndarray, np.ndarray]:
    boxes = np.array([c.as_xyxy() for c in candidates], dtype=np.float64)
    scores = np.array([c.confidence for c in candidates], dtype=np.float64)
    return boxes, scores
