from dataclasses import dataclass
import logging
from typing import List, Sequence

import numpy as np

from .metadata import COCO_CLASSES
from .types import Candidate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecoderConfig:
    """
    Layout and threshold for decoding a YOLOv8 (4 + C, N) head.
    """

    input_size: int = 640
    num_classes: int = 80
    num_cells: int = 8400
    conf_threshold: float = 0.5


class DetectionDecoder:
    """
    Decode the raw YOLOv8 output into candidate boxes.

    Expected layout (per image), channels first:
    - rows 0..3: cx, cy, w, h in network input pixels
    - rows 4..4+C: per-class confidence scores

    Accepted shapes are (1, 4 + C, N), (4 + C, N) or flat (4 + C) * N.
    """

    def __init__(self, cfg: DecoderConfig = DecoderConfig(), class_names: Sequence[str] = COCO_CLASSES):
        self.cfg = cfg
        self.class_names = tuple(class_names)

    def decode(self, preds: np.ndarray, orig_width: int, orig_height: int) -> List[Candidate]:
        """
        Convert the raw output into candidates in original image coordinates.

        Cells whose best class score is below `conf_threshold` are dropped.
        Output keeps cell-index order.
        """

        cfg = self.cfg
        if cfg.num_cells == 0 or cfg.num_classes == 0:
            return []

        p = self._reshape(preds)
        boxes = p[0:4, :]
        class_scores = p[4:, :]

        # argmax keeps the first maximum, so ties resolve to the lowest class id
        class_ids = np.argmax(class_scores, axis=0)
        scores = class_scores[class_ids, np.arange(class_scores.shape[1])]

        keep = np.nonzero(scores >= cfg.conf_threshold)[0]
        if keep.size == 0:
            logger.debug("No cell above conf_threshold=%.2f", cfg.conf_threshold)
            return []

        boxes_xyxy = self._scale_boxes(boxes[:, keep].T.astype(np.float64), orig_width, orig_height)

        candidates = [
            Candidate(
                x1=float(x1),
                y1=float(y1),
                x2=float(x2),
                y2=float(y2),
                label=self._label(int(cls_id)),
                confidence=float(score),
            )
            for (x1, y1, x2, y2), score, cls_id in zip(boxes_xyxy, scores[keep], class_ids[keep])
        ]
        logger.debug("Decoded %d candidates from %d cells", len(candidates), cfg.num_cells)
        return candidates

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _reshape(self, preds: np.ndarray) -> np.ndarray:
        rows = 4 + self.cfg.num_classes
        cols = self.cfg.num_cells

        p = np.asarray(preds)
        if p.ndim == 3:
            if p.shape[0] != 1:
                raise ValueError(f"Batch > 1 is not supported (got shape {p.shape}). Pass one image at a time.")
            p = p[0]
        if p.ndim == 1 and p.size == rows * cols:
            return p.reshape(rows, cols)
        if p.shape == (rows, cols):
            return p
        raise ValueError(f"Unsupported YOLO output shape {p.shape}, expected ({rows}, {cols}).")

    def _scale_boxes(self, boxes: np.ndarray, orig_width: int, orig_height: int) -> np.ndarray:
        """
        cxcywh in network space -> xyxy in original image pixels.
        """

        size = float(self.cfg.input_size)
        cx, cy, w, h = boxes.T
        x1 = (cx - w / 2) / size * orig_width
        y1 = (cy - h / 2) / size * orig_height
        x2 = (cx + w / 2) / size * orig_width
        y2 = (cy + h / 2) / size * orig_height
        return np.stack([x1, y1, x2, y2], axis=1)

    def _label(self, class_id: int) -> str:
        if 0 <= class_id < len(self.class_names):
            return self.class_names[class_id]
        return str(class_id)

