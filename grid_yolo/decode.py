from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .activation import ActivationMode, ActivationTransform
from .errors import InvalidConfiguration
from .indexing import TensorIndexer
from .types import AnchorPrior, Detection, GridDescriptor


class BoxDecoder:
    """
    Decode a grid detector output into pixel-space candidate boxes.

    Every (anchor, row, col) triple yields at most one candidate. A triple must
    clear `conf_threshold` twice: once on objectness (checked first, so class
    scores are only activated for survivors) and once on its best class score.
    The reported score is the class score alone.

    Candidates come out in tensor order (anchor, then row, then column).
    """

    def __init__(
        self,
        grid: GridDescriptor,
        anchors: Sequence[AnchorPrior],
        labels: Optional[Sequence[str]] = None,
        mode: Union[str, ActivationMode] = ActivationMode.RAW,
        conf_threshold: float = 0.3,
    ):
        if len(anchors) != grid.anchor_count:
            raise InvalidConfiguration(
                f"Expected {grid.anchor_count} anchor priors, got {len(anchors)}."
            )
        if labels is not None and len(labels) != grid.class_count:
            raise InvalidConfiguration(f"Expected {grid.class_count} labels, got {len(labels)}.")
        if not 0.0 <= conf_threshold <= 1.0:
            raise InvalidConfiguration(f"conf_threshold must be in [0, 1] (got {conf_threshold}).")

        self.grid = grid
        self.labels = tuple(labels) if labels is not None else None
        self.conf_threshold = float(conf_threshold)
        self.indexer = TensorIndexer(grid)
        self.transform = ActivationTransform(mode, anchors)

    def decode_arrays(self, tensor) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Returns (boxes, scores, class_ids) with boxes as (N, 4) top-left xywh.
        """

        cube = self.indexer.as_grid(tensor)  # (A, 5 + C, H, W)
        thr = self.conf_threshold

        objectness = np.asarray(self.transform.objectness(cube[:, 4]))
        b, cy, cx = np.nonzero(objectness >= thr)
        if b.size == 0:
            return _empty()

        dx, dy = self.transform.offsets(cube[b, 0, cy, cx], cube[b, 1, cy, cx])
        dw, dh = self.transform.sizes(cube[b, 2, cy, cx], cube[b, 3, cy, cx], b)

        # (N, C)
        class_scores = self.transform.class_scores(cube[b, 5:, cy, cx], axis=-1)
        class_ids = np.argmax(class_scores, axis=1)
        scores = class_scores[np.arange(class_scores.shape[0]), class_ids]

        keep = scores >= thr
        if not np.any(keep):
            return _empty()

        cell_w = self.grid.cell_width
        cell_h = self.grid.cell_height
        center_x = (cx[keep] + np.asarray(dx)[keep]) * cell_w
        center_y = (cy[keep] + np.asarray(dy)[keep]) * cell_h
        width = np.asarray(dw)[keep] * cell_w
        height = np.asarray(dh)[keep] * cell_h

        boxes = np.stack([center_x - width / 2, center_y - height / 2, width, height], axis=1)
        return boxes, scores[keep], class_ids[keep].astype(np.int64)

    def decode(self, tensor) -> List[Detection]:
        boxes, scores, class_ids = self.decode_arrays(tensor)
        return to_detections(boxes, scores, class_ids, self.labels)


def to_detections(
    boxes: np.ndarray,
    scores: np.ndarray,
    class_ids: np.ndarray,
    labels: Optional[Sequence[str]] = None,
) -> List[Detection]:
    return [
        Detection(
            x=float(x),
            y=float(y),
            width=float(w),
            height=float(h),
            score=float(score),
            class_id=int(cls_id),
            label=labels[int(cls_id)] if labels is not None else None,
        )
        for (x, y, w, h), score, cls_id in zip(boxes, scores, class_ids)
    ]


def _empty() -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    return (
        np.empty((0, 4), dtype=np.float64),
        np.empty((0,), dtype=np.float64),
        np.empty((0,), dtype=np.int64),
    )
