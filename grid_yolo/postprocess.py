from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .activation import ActivationMode
from .clip import clip_xywh
from .decode import BoxDecoder, to_detections
from .errors import InvalidConfiguration
from .nms import NMSConfig, batched_nms, nms, select_topk
from .types import AnchorPrior, Detection, GridDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridPostConfig:
    """
    Everything needed to turn one raw grid output into final detections.
    """

    grid: GridDescriptor
    anchors: Tuple[AnchorPrior, ...]
    labels: Tuple[str, ...]
    activation_mode: ActivationMode = ActivationMode.RAW
    conf_threshold: float = 0.3
    iou_threshold: float = 0.45
    max_detections: int = 50
    # If False, skip NMS and only keep top `max_detections` by score.
    apply_nms: bool = True
    # If False, runs per-class NMS then merges results by score.
    class_agnostic_nms: bool = True
    # Optional list of class IDs to keep; None keeps all.
    class_ids: Optional[Tuple[int, ...]] = None
    clip: bool = True

    def __post_init__(self) -> None:
        # Normalize list inputs so the config stays hashable and immutable.
        object.__setattr__(self, "anchors", tuple(self.anchors))
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "activation_mode", ActivationMode.parse(self.activation_mode))
        if self.class_ids is not None:
            object.__setattr__(self, "class_ids", tuple(int(c) for c in self.class_ids))

        if len(self.anchors) != self.grid.anchor_count:
            raise InvalidConfiguration(
                f"anchors has {len(self.anchors)} entries but grid.anchor_count is {self.grid.anchor_count}"
            )
        if len(self.labels) != self.grid.class_count:
            raise InvalidConfiguration(
                f"labels has {len(self.labels)} entries but grid.class_count is {self.grid.class_count}"
            )
        for name in ("conf_threshold", "iou_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidConfiguration(f"{name} must be in [0, 1] (got {value})")
        if self.max_detections < 0:
            raise InvalidConfiguration(f"max_detections must be >= 0 (got {self.max_detections})")
        if self.class_ids is not None:
            bad = [c for c in self.class_ids if not 0 <= c < self.grid.class_count]
            if bad:
                raise InvalidConfiguration(f"class_ids out of range: {bad}")


class GridPostprocessor:
    """
    Post-process for grid/anchor detectors (YOLOv2 style heads):

        raw output -> decode (+ confidence gates) -> clip to image -> NMS

    Input is one image's output as a flat float sequence, or any array whose
    size matches the grid (a leading batch axis of 1 is fine).
    """

    def __init__(self, cfg: GridPostConfig):
        self.cfg = cfg
        self.decoder = BoxDecoder(
            cfg.grid,
            cfg.anchors,
            labels=cfg.labels,
            mode=cfg.activation_mode,
            conf_threshold=cfg.conf_threshold,
        )

    def process(self, tensor) -> List[Detection]:
        boxes, scores, class_ids = self.decoder.decode_arrays(tensor)
        logger.debug("decoded %d candidate(s) above conf %.3f", scores.size, self.cfg.conf_threshold)
        if scores.size == 0:
            return []

        # Optional class filter
        if self.cfg.class_ids is not None:
            mask = np.isin(class_ids, np.array(self.cfg.class_ids))
            boxes, scores, class_ids = boxes[mask], scores[mask], class_ids[mask]
            if scores.size == 0:
                return []

        # Clip before NMS so overlaps are measured on the boxes that are returned.
        if self.cfg.clip:
            boxes = clip_xywh(boxes, self.cfg.grid.image_width, self.cfg.grid.image_height)

        # NMS (optional) / Top-K
        if self.cfg.apply_nms:
            keep = self._apply_nms(boxes, scores, class_ids)
        else:
            keep = select_topk(scores, self.cfg.max_detections)
        logger.debug("kept %d of %d candidate(s)", keep.size, scores.size)

        return to_detections(boxes[keep], scores[keep], class_ids[keep], self.cfg.labels)

    __call__ = process

    def _apply_nms(self, boxes: np.ndarray, scores: np.ndarray, class_ids: np.ndarray) -> np.ndarray:
        nms_cfg = NMSConfig(iou_threshold=self.cfg.iou_threshold, max_detections=self.cfg.max_detections)
        if self.cfg.class_agnostic_nms:
            return nms(boxes, scores, nms_cfg)
        return batched_nms(boxes, scores, class_ids, nms_cfg)


def decode_detections(tensor, cfg: GridPostConfig) -> List[Detection]:
    return GridPostprocessor(cfg).process(tensor)


def build_post_config(
    grid: GridDescriptor,
    anchors: Sequence[Union[AnchorPrior, Tuple[float, float]]],
    labels: Sequence[str],
    **overrides,
) -> GridPostConfig:
    """
    Convenience constructor accepting anchors as plain (width, height) pairs.
    """

    priors = tuple(a if isinstance(a, AnchorPrior) else AnchorPrior(float(a[0]), float(a[1])) for a in anchors)
    return GridPostConfig(grid=grid, anchors=priors, labels=tuple(labels), **overrides)
