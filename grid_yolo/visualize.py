from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from .types import Detection

_FONT_SCALE = 0.5


def class_color(class_id) -> Tuple[int, int, int]:
    """
    BGR color for a class. Hues are spread by the golden ratio so that
    neighbouring class ids get distinct colors.
    """

    import cv2  # type: ignore

    if class_id is None:
        return (255, 255, 255)
    hue = int((class_id * 0.618033988749895 % 1.0) * 180)
    hsv = np.array([[[hue, 200, 255]]], dtype=np.uint8)
    b, g, r = cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)[0, 0]
    return int(b), int(g), int(r)


def draw_detections(
    image_bgr: np.ndarray,
    detections: Iterable[Detection],
    *,
    show_score: bool = True,
    thickness: int = 2,
) -> np.ndarray:
    """
    Draw detections (already clipped to the image) on a copy of a BGR image.

    Each box gets a filled caption strip on its top edge: the class label,
    or the class id when no labels were configured.
    """

    try:
        import cv2  # type: ignore
    except ImportError as e:  # pragma: no cover
        raise ImportError("OpenCV is required for draw_detections(). Install with `pip install opencv-python`.") from e

    if image_bgr is None or not hasattr(image_bgr, "shape"):
        raise TypeError("image_bgr must be a NumPy array (BGR).")
    if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_bgr, 'shape', None)}")

    canvas = image_bgr.copy()
    for det in detections:
        if det.width <= 0 or det.height <= 0:
            continue
        x, y, w, h = (int(round(v)) for v in det.as_xywh())
        color = class_color(det.class_id)
        cv2.rectangle(canvas, (x, y, w, h), color, thickness)

        caption = det.label if det.label is not None else str(det.class_id)
        if show_score:
            caption = f"{caption} {det.score:.2f}"
        (tw, th), base = cv2.getTextSize(caption, cv2.FONT_HERSHEY_SIMPLEX, _FONT_SCALE, 1)
        # Strip sits above the box unless that would leave the image.
        top = y - th - base if y - th - base >= 0 else y
        cv2.rectangle(canvas, (x, top, tw, th + base), color, cv2.FILLED)
        cv2.putText(canvas, caption, (x, top + th), cv2.FONT_HERSHEY_SIMPLEX, _FONT_SCALE, (0, 0, 0), 1, cv2.LINE_AA)

    return canvas
