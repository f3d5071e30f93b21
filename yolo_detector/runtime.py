from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from .backends import InferenceEngine
from .config import DetectorConfig
from .errors import DetectorError, InferenceError
from .metadata import COCO_CLASSES, load_class_names
from .nms import NMSConfig, NonMaxSuppressor
from .postprocess import DecoderConfig, DetectionDecoder
from .preprocess import TensorPreprocessor
from .types import BoundingBox, PreparedInput


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def find_project_root(
    start: Optional[PathLike] = None,
    markers: Sequence[str] = ("pyproject.toml", ".git"),
) -> Path:
    """
    Best-effort project root discovery, used to resolve relative model paths.
    """

    p = Path(start) if start is not None else Path.cwd()
    p = p.resolve()

    if p.is_file():
        p = p.parent

    for parent in (p, *p.parents):
        for m in markers:
            if (parent / m).exists():
                return parent
    return p


def resolve_path(path: PathLike, root: Optional[PathLike] = "auto") -> Path:
    """
    Resolve `path` to an absolute Path.

    - Absolute paths are returned as-is.
    - Relative paths are resolved against `root`, or the project root when
      `root` is "auto"/None.
    """

    p = Path(path)
    if p.is_absolute():
        return p

    if root == "auto" or root is None:
        base = find_project_root()
    else:
        base = Path(root).resolve()

    return (base / p).resolve()


class DetectionPipeline:
    """
    image bytes -> tensor -> raw output -> candidates -> final boxes.

    Holds no per-request state, so one instance (and its engine session) can
    serve concurrent requests.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        *,
        preprocessor: Optional[TensorPreprocessor] = None,
        decoder: Optional[DetectionDecoder] = None,
        suppressor: Optional[NonMaxSuppressor] = None,
    ):
        self.engine = engine
        self.preprocessor = preprocessor or TensorPreprocessor()
        self.decoder = decoder or DetectionDecoder()
        self.suppressor = suppressor or NonMaxSuppressor()

    @classmethod
    def from_config(
        cls,
        engine: InferenceEngine,
        cfg: DetectorConfig,
        class_names: Sequence[str] = COCO_CLASSES,
    ) -> "DetectionPipeline":
        return cls(
            engine,
            preprocessor=TensorPreprocessor(cfg.input_size),
            decoder=DetectionDecoder(
                DecoderConfig(
                    input_size=cfg.input_size,
                    num_classes=cfg.num_classes,
                    num_cells=cfg.num_cells,
                    conf_threshold=cfg.conf_threshold,
                ),
                class_names=class_names,
            ),
            suppressor=NonMaxSuppressor(
                NMSConfig(
                    iou_threshold=cfg.iou_threshold,
                    max_detections=cfg.max_detections,
                    class_agnostic=cfg.class_agnostic_nms,
                )
            ),
        )

    def detect(self, data: bytes) -> List[BoundingBox]:
        return self._run(self.preprocessor.prepare(data))

    def detect_array(self, image_rgb: np.ndarray) -> List[BoundingBox]:
        return self._run(self.preprocessor.prepare_array(image_rgb))

    __call__ = detect

    def _run(self, prep: PreparedInput) -> List[BoundingBox]:
        try:
            raw = self.engine.run(prep.tensor)
        except DetectorError:
            raise
        except Exception as exc:
            raise InferenceError(f"Inference engine failed: {exc}") from exc

        candidates = self.decoder.decode(raw, prep.orig_width, prep.orig_height)
        return self.suppressor.suppress(candidates)


def load_pipeline(cfg: DetectorConfig = DetectorConfig(), *, root: Optional[PathLike] = "auto") -> DetectionPipeline:
    """
    Build a pipeline backed by an ONNX Runtime session.

    The session is created here, once; keep the returned pipeline for the
    lifetime of the process instead of calling this per request.
    """

    from .backends.onnxruntime_backend import OnnxRuntimeBackendConfig, OnnxRuntimeEngine

    engine = OnnxRuntimeEngine(
        resolve_path(cfg.model_path, root=root),
        OnnxRuntimeBackendConfig(
            providers=cfg.providers,
            input_name=cfg.input_name,
            output_name=cfg.output_name,
        ),
    )

    class_names: Sequence[str] = COCO_CLASSES
    if cfg.metadata_path:
        class_names = load_class_names(str(resolve_path(cfg.metadata_path, root=root)))
        logger.info("Loaded %d class names from %s", len(class_names), cfg.metadata_path)

    return DetectionPipeline.from_config(engine, cfg, class_names=class_names)
