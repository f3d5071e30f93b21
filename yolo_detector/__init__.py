"""
YOLOv8 detection pre/post-processing.

Turns encoded image bytes into the (1, 3, S, S) tensor a YOLOv8 export
expects, and the raw (1, 4 + C, N) output back into labelled, non-overlapping
boxes. Inference runtimes live in `yolo_detector.backends` and are only
imported when a pipeline is loaded from a model file.
"""

from .types import BoundingBox, Candidate, PreparedInput
from .errors import DetectorError, EmptyImageError, ImageDecodeError, InferenceError
from .config import DetectorConfig, load_detector_config
from .geometry import area, intersection_area, iou, union_area
from .metadata import COCO_CLASSES, load_class_names
from .preprocess import TensorPreprocessor, decode_image
from .postprocess import DecoderConfig, DetectionDecoder
from .nms import NMSConfig, NonMaxSuppressor, nms
from .runtime import DetectionPipeline, load_pipeline, find_project_root, resolve_path
from .visualize import draw_detections

__all__ = [
    "BoundingBox",
    "Candidate",
    "PreparedInput",
    "DetectorError",
    "EmptyImageError",
    "ImageDecodeError",
    "InferenceError",
    "DetectorConfig",
    "load_detector_config",
    "area",
    "intersection_area",
    "iou",
    "union_area",
    "COCO_CLASSES",
    "load_class_names",
    "TensorPreprocessor",
    "decode_image",
    "DecoderConfig",
    "DetectionDecoder",
    "NMSConfig",
    "NonMaxSuppressor",
    "nms",
    "DetectionPipeline",
    "load_pipeline",
    "find_project_root",
    "resolve_path",
    "draw_detections",
]
