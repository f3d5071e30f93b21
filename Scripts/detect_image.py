import argparse
import dataclasses
import json
import logging
from pathlib import Path

import cv2

from yolo_detector import DetectorConfig, decode_image, draw_detections, load_detector_config, load_pipeline


def main() -> int:
    parser = argparse.ArgumentParser(description="Run YOLOv8 detection on one image and print the boxes as JSON.")
    parser.add_argument("--image", required=True, help="Path to an input image.")
    parser.add_argument("--config", default=None, help="Optional detector config JSON.")
    parser.add_argument("--model", default=None, help="Path to a YOLOv8 .onnx model (overrides config).")
    parser.add_argument("--metadata", default=None, help="Optional metadata.yaml with class names.")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold.")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold for NMS.")
    parser.add_argument(
        "--onnx-providers",
        default=None,
        help='Comma-separated ORT providers, e.g. "CUDAExecutionProvider,CPUExecutionProvider".',
    )
    parser.add_argument("--out", default=None, help="Optional output path to save the visualization.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_detector_config(Path(args.config)) if args.config else DetectorConfig()
    overrides = {}
    if args.model:
        overrides["model_path"] = args.model
    if args.metadata:
        overrides["metadata_path"] = args.metadata
    if args.conf is not None:
        overrides["conf_threshold"] = args.conf
    if args.iou is not None:
        overrides["iou_threshold"] = args.iou
    if args.onnx_providers:
        overrides["providers"] = tuple(p.strip() for p in str(args.onnx_providers).split(",") if p.strip())
    if overrides:
        cfg = dataclasses.replace(cfg, **overrides)

    data = Path(args.image).read_bytes()
    pipeline = load_pipeline(cfg)
    boxes = pipeline.detect(data)

    print(json.dumps([box.to_list() for box in boxes]))

    if args.out:
        vis = draw_detections(decode_image(data), boxes)
        ok = cv2.imwrite(args.out, cv2.cvtColor(vis, cv2.COLOR_RGB2BGR))
        if not ok:
            raise RuntimeError(f"Failed to write output image: {args.out}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
