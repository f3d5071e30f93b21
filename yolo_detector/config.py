from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence


CONFIG_ENV_VAR = "YOLO_DETECTOR_CONFIG"


@dataclass(frozen=True)
class DetectorConfig:
    """
    Settings for the whole detection pipeline.

    Defaults match a stock YOLOv8 export: 640x640 input, 80 COCO classes,
    8400 candidate cells.
    """

    input_size: int = 640
    num_classes: int = 80
    num_cells: int = 8400
    conf_threshold: float = 0.5
    iou_threshold: float = 0.7
    class_agnostic_nms: bool = True
    max_detections: Optional[int] = None
    model_path: str = "models/yolov8m.onnx"
    providers: Optional[Sequence[str]] = None
    input_name: str = "images"
    output_name: str = "output0"
    metadata_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.input_size < 1:
            raise ValueError("input_size must be >= 1")
        if self.num_classes < 0:
            raise ValueError("num_classes must be >= 0")
        if self.num_cells < 0:
            raise ValueError("num_cells must be >= 0")
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be within [0, 1]")
        if not 0.0 < self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be within (0, 1]")
        if self.max_detections is not None and self.max_detections < 1:
            raise ValueError("max_detections must be >= 1 if provided")


_INT_KEYS = ("input_size", "num_classes", "num_cells")
_FLOAT_KEYS = ("conf_threshold", "iou_threshold")
_STR_KEYS = ("model_path", "input_name", "output_name")


def _require_int(payload: Dict[str, Any], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _require_number(payload: Dict[str, Any], key: str) -> float:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def load_detector_config(path: Path) -> DetectorConfig:
    if not path.exists():
        raise FileNotFoundError(f"Detector config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid detector config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Detector config must be a JSON object")

    allowed = set(DetectorConfig.__dataclass_fields__)
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown detector config keys: {unknown}")

    kwargs: Dict[str, Any] = {}
    for key in _INT_KEYS:
        if key in payload:
            kwargs[key] = _require_int(payload, key)
    for key in _FLOAT_KEYS:
        if key in payload:
            kwargs[key] = _require_number(payload, key)
    for key in _STR_KEYS:
        if key in payload:
            if not isinstance(payload[key], str) or not payload[key]:
                raise ValueError(f"{key} must be a non-empty string")
            kwargs[key] = payload[key]

    if "class_agnostic_nms" in payload:
        if not isinstance(payload["class_agnostic_nms"], bool):
            raise ValueError("class_agnostic_nms must be a boolean")
        kwargs["class_agnostic_nms"] = payload["class_agnostic_nms"]

    if payload.get("max_detections") is not None:
        kwargs["max_detections"] = _require_int(payload, "max_detections")

    providers = payload.get("providers")
    if providers is not None:
        if not isinstance(providers, list) or not all(isinstance(p, str) for p in providers):
            raise ValueError("providers must be a list of strings")
        kwargs["providers"] = tuple(providers)

    metadata_path = payload.get("metadata_path")
    if metadata_path is not None:
        if not isinstance(metadata_path, str):
            raise ValueError("metadata_path must be a string if provided")
        kwargs["metadata_path"] = metadata_path

    return DetectorConfig(**kwargs)


def config_from_env(default: Optional[DetectorConfig] = None) -> DetectorConfig:
    """
    Load the config named by `YOLO_DETECTOR_CONFIG`, or fall back to `default`.
    """

    path = os.environ.get(CONFIG_ENV_VAR)
    if path:
        return load_detector_config(Path(path))
    return default if default is not None else DetectorConfig()
