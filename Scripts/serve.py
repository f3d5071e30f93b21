import argparse
import logging

import uvicorn

from yolo_detector.server import create_app


def main() -> int:
    parser = argparse.ArgumentParser(description="Serve POST /detect over HTTP.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--index", default=None, help="Optional HTML page served at GET /.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Model path and thresholds come from the JSON file named by YOLO_DETECTOR_CONFIG.
    uvicorn.run(create_app(index_path=args.index), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
