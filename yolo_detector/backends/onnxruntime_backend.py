from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from ..errors import InferenceError


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    Configuration for ONNX Runtime inference.

    - providers: ORT execution providers (e.g., ["CUDAExecutionProvider", "CPUExecutionProvider"])
    - input_name/output_name: preferred I/O names; the model's first input/output
      is used when the name is not present in the graph
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = "images"
    output_name: Optional[str] = "output0"


class OnnxRuntimeEngine:
    """
    ONNX Runtime inference engine.

    The session is created once and reused for every `run` call. Expects an
    NCHW float32 tensor shaped (1, 3, S, S); returns the primary output as a
    NumPy array, typically (1, 4 + C, N).
    """

    def __init__(self, model_path: PathLike, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        import onnxruntime as ort

        self._ort = ort
        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        sess_opts = ort.SessionOptions()
        providers = list(cfg.providers) if cfg.providers is not None else None
        self.session = ort.InferenceSession(str(self.model_path), sess_options=sess_opts, providers=providers)

        self.input_name = _pick_name(cfg.input_name, [i.name for i in self.session.get_inputs()])
        self.output_name = _pick_name(cfg.output_name, [o.name for o in self.session.get_outputs()])
        logger.info(
            "Loaded ONNX model %s (input=%s, output=%s, providers=%s)",
            self.model_path,
            self.input_name,
            self.output_name,
            ",".join(self.providers_in_use),
        )

    @property
    def providers_in_use(self) -> Sequence[str]:
        # ORT returns providers in priority order for this session.
        return tuple(self.session.get_providers())

    @property
    def available_providers(self) -> Sequence[str]:
        return tuple(self._ort.get_available_providers())

    def run(self, tensor: np.ndarray) -> np.ndarray:
        try:
            outputs = self.session.run([self.output_name], {self.input_name: tensor})
        except Exception as exc:
            raise InferenceError(f"ONNX Runtime inference failed: {exc}") from exc
        return np.asarray(outputs[0])


def _pick_name(preferred: Optional[str], available: Sequence[str]) -> str:
    if not available:
        raise InferenceError("ONNX model exposes no inputs/outputs.")
    if preferred and preferred in available:
        return preferred
    return available[0]
