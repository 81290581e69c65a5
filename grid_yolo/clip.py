from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List

import numpy as np

from .types import Detection


def clip_box(det: Detection, image_width: float, image_height: float) -> Detection:
    """
    Clip a box to [0, image_width] x [0, image_height].

    Boxes that end up with no width or height are returned as they are after
    clipping; dropping them is up to the caller.
    """

    x, y, w, h = det.as_xywh()

    if x < 0:
        w += x
        x = 0.0
    if y < 0:
        h += y
        y = 0.0
    if x + w > image_width:
        w = image_width - x
    if y + h > image_height:
        h = image_height - y

    if (x, y, w, h) == det.as_xywh():
        return det
    return replace(det, x=float(x), y=float(y), width=float(w), height=float(h))


def clip_boxes(detections: Iterable[Detection], image_width: float, image_height: float) -> List[Detection]:
    return [clip_box(d, image_width, image_height) for d in detections]


def clip_xywh(boxes: np.ndarray, image_width: float, image_height: float) -> np.ndarray:
    """
    Array form of `clip_box` for (N, 4) top-left xywh boxes. Returns a new array.
    """

    out = np.array(boxes, dtype=np.float64).reshape(-1, 4)
    x, y = out[:, 0], out[:, 1]

    left = x < 0
    out[left, 2] += x[left]
    out[left, 0] = 0.0
    top = y < 0
    out[top, 3] += y[top]
    out[top, 1] = 0.0

    out[:, 2] = np.where(out[:, 0] + out[:, 2] > image_width, image_width - out[:, 0], out[:, 2])
    out[:, 3] = np.where(out[:, 1] + out[:, 3] > image_height, image_height - out[:, 1], out[:, 3])
    return out
