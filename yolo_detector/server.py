"""
HTTP surface for the detection pipeline.

    POST /detect   multipart field `image_file` -> [[x1, y1, x2, y2, label, confidence], ...]
    GET  /health   liveness
    GET  /         optional index page
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, List, Optional, Union

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse

from .config import config_from_env
from .errors import EmptyImageError, ImageDecodeError, InferenceError
from .runtime import DetectionPipeline, load_pipeline


logger = logging.getLogger(__name__)

PipelineFactory = Callable[[], DetectionPipeline]


def _default_factory() -> DetectionPipeline:
    return load_pipeline(config_from_env())


def create_app(
    pipeline_factory: Optional[PipelineFactory] = None,
    index_path: Optional[Union[str, Path]] = None,
) -> FastAPI:
    """
    Build the FastAPI app. The pipeline (and its inference session) is created
    once at startup and shared by every request.
    """

    factory = pipeline_factory or _default_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.pipeline = factory()
        try:
            yield
        finally:
            app.state.pipeline = None

    app = FastAPI(title="YOLO Object Detector", version="0.1.0", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/")
    async def index():
        if index_path is None or not Path(index_path).is_file():
            raise HTTPException(status_code=404, detail="No index page configured")
        return FileResponse(index_path)

    @app.post("/detect")
    async def detect(request: Request, image_file: UploadFile = File(...)) -> List[list]:
        pipeline: DetectionPipeline = request.app.state.pipeline
        data = await image_file.read()
        try:
            boxes = await run_in_threadpool(pipeline.detect, data)
        except (ImageDecodeError, EmptyImageError) as exc:
            logger.warning("Rejected upload %r: %s", image_file.filename, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except InferenceError as exc:
            logger.exception("Inference failed for upload %r", image_file.filename)
            raise HTTPException(status_code=502, detail=str(exc)) from exc

        logger.debug("Detected %d boxes in %r", len(boxes), image_file.filename)
        return [box.to_list() for box in boxes]

    return app
