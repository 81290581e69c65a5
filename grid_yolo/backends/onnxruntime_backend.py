from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np


class OnnxRuntimeBackend:
    """
    Runs a grid detector exported to ONNX and hands back its raw output,
    flattened for `GridPostprocessor`.

    Tiny YOLOv2 takes a (1, 3, 416, 416) float32 blob and returns (1, 125, 13, 13).
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        *,
        providers: Optional[Sequence[str]] = None,
        input_name: Optional[str] = None,
        output_name: Optional[str] = None,
    ):
        try:
            import onnxruntime as ort  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install grid-yolo[onnx]`."
            ) from e

        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        self.session = ort.InferenceSession(
            str(self.model_path), providers=list(providers) if providers is not None else None
        )
        inputs = {i.name: i for i in self.session.get_inputs()}
        outputs = {o.name: o for o in self.session.get_outputs()}
        self.input_name = input_name or next(iter(inputs))
        self.output_name = output_name or next(iter(outputs))
        if self.input_name not in inputs or self.output_name not in outputs:
            raise ValueError(
                f"Model {self.model_path.name} has inputs {sorted(inputs)} and outputs {sorted(outputs)}"
            )
        self.output_shape: Tuple[object, ...] = tuple(outputs[self.output_name].shape)

    def infer(self, blob: np.ndarray) -> np.ndarray:
        (raw,) = self.session.run([self.output_name], {self.input_name: np.ascontiguousarray(blob, dtype=np.float32)})
        return np.asarray(raw, dtype=np.float32).reshape(-1)
