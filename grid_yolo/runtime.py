from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from .errors import ShapeMismatch
from .postprocess import GridPostConfig, GridPostprocessor
from .types import Detection, GridDescriptor

logger = logging.getLogger(__name__)


class GridYoloPipeline:
    """
    inference -> postprocess.

    `infer_fn` takes the model input blob (already resized and laid out by the
    caller) and returns the raw grid output for a single image.
    """

    def __init__(
        self,
        infer_fn: Callable[[np.ndarray], np.ndarray],
        post_cfg: GridPostConfig,
        *,
        backend: Optional[object] = None,
        backend_name: Optional[str] = None,
    ):
        self._infer_fn = infer_fn
        self.backend = backend
        self.backend_name = backend_name
        self.post = GridPostprocessor(post_cfg)

    def __call__(self, blob: np.ndarray) -> List[Detection]:
        raw = self._infer_fn(blob)
        detections = self.post.process(raw)
        logger.debug("%s: %d detection(s)", self.backend_name or "pipeline", len(detections))
        return detections


def check_output_shape(shape: Sequence[object], grid: GridDescriptor) -> None:
    """
    Compare a model's declared output shape with the grid layout.

    Symbolic dimensions (names or None) make the size unknown until inference,
    in which case nothing is checked here.
    """

    dims = list(shape)
    if not dims or not all(isinstance(d, int) for d in dims):
        return
    size = int(np.prod(dims))
    if size != grid.expected_length:
        raise ShapeMismatch(grid.expected_length, size)


def load_pipeline(
    model_path: Union[str, Path],
    post_cfg: GridPostConfig,
    *,
    providers: Optional[Sequence[str]] = None,
    input_name: Optional[str] = None,
    output_name: Optional[str] = None,
) -> GridYoloPipeline:
    """
    Create a pipeline backed by ONNX Runtime for a model on disk.

        pipe = load_pipeline("models/tinyyolov2-8.onnx", tiny_yolov2_voc())

    The model's declared output size is checked against `post_cfg.grid`
    before any frame is run.
    """

    path = Path(model_path)
    if path.suffix.lower() != ".onnx":
        raise ValueError(f"Only .onnx models are supported (got '{path.suffix}').")

    from .backends.onnxruntime_backend import OnnxRuntimeBackend

    backend = OnnxRuntimeBackend(path, providers=providers, input_name=input_name, output_name=output_name)
    check_output_shape(backend.output_shape, post_cfg.grid)
    return GridYoloPipeline(backend.infer, post_cfg, backend=backend, backend_name="onnxruntime")
