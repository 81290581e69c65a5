from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .types import Detection


@dataclass(frozen=True)
class NMSConfig:
    iou_threshold: float = 0.45
    max_detections: int = 300


def iou(a: Sequence[float], b: Sequence[float]) -> float:
    """
    IoU of two (x, y, w, h) boxes. Zero if either box has no area.
    """

    ax, ay, aw, ah = (float(v) for v in a)
    bx, by, bw, bh = (float(v) for v in b)
    area_a = aw * ah if aw > 0 and ah > 0 else 0.0
    area_b = bw * bh if bw > 0 and bh > 0 else 0.0
    if area_a <= 0 or area_b <= 0:
        return 0.0

    inter_w = max(0.0, min(ax + aw, bx + bw) - max(ax, bx))
    inter_h = max(0.0, min(ay + ah, by + bh) - max(ay, by))
    inter = inter_w * inter_h
    return inter / (area_a + area_b - inter)


def _iou_one_to_many(box: np.ndarray, others: np.ndarray) -> np.ndarray:
    x1, y1, w, h = box
    ox1, oy1, ow, oh = others[:, 0], others[:, 1], others[:, 2], others[:, 3]

    inter_w = np.maximum(0.0, np.minimum(x1 + w, ox1 + ow) - np.maximum(x1, ox1))
    inter_h = np.maximum(0.0, np.minimum(y1 + h, oy1 + oh) - np.maximum(y1, oy1))
    inter = inter_w * inter_h

    area = w * h if (w > 0 and h > 0) else 0.0
    other_areas = np.where((ow > 0) & (oh > 0), ow * oh, 0.0)
    union = area + other_areas - inter

    out = np.zeros(others.shape[0], dtype=np.float64)
    valid = (area > 0) & (other_areas > 0)
    out[valid] = inter[valid] / union[valid]
    return out


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Greedy NMS over (N, 4) top-left xywh boxes. Returns kept indices in
    acceptance order (highest score first, ties by input order).

    A box is suppressed when its IoU with an accepted box is strictly greater
    than `cfg.iou_threshold`.
    """

    boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)
    scores = np.asarray(scores, dtype=np.float64).reshape(-1)
    if boxes.shape[0] == 0 or cfg.max_detections <= 0:
        return np.empty((0,), dtype=np.int64)

    order = np.argsort(-scores, kind="stable")
    ordered = boxes[order]
    active = np.ones(order.size, dtype=bool)
    live = order.size
    keep: List[int] = []

    for i in range(order.size):
        if live == 0:
            break
        if not active[i]:
            continue

        keep.append(int(order[i]))
        active[i] = False
        live -= 1
        if len(keep) >= cfg.max_detections:
            break

        rest = np.nonzero(active[i + 1 :])[0] + i + 1
        if rest.size == 0:
            continue
        overlaps = _iou_one_to_many(ordered[i], ordered[rest])
        suppressed = rest[overlaps > cfg.iou_threshold]
        active[suppressed] = False
        live -= int(suppressed.size)

    return np.array(keep, dtype=np.int64)


def select_topk(scores: np.ndarray, k: int) -> np.ndarray:
    scores = np.asarray(scores, dtype=np.float64).reshape(-1)
    if k <= 0:
        return np.empty((0,), dtype=np.int64)
    return np.argsort(-scores, kind="stable")[:k].astype(np.int64)


def batched_nms(boxes: np.ndarray, scores: np.ndarray, class_ids: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Per-class NMS; survivors of every class are merged by score.
    """

    class_ids = np.asarray(class_ids).reshape(-1)
    scores = np.asarray(scores, dtype=np.float64).reshape(-1)
    kept: List[int] = []
    for cls in np.unique(class_ids):
        idx = np.nonzero(class_ids == cls)[0]
        keep_local = nms(np.asarray(boxes)[idx], scores[idx], cfg)
        kept.extend(idx[keep_local].tolist())

    if not kept:
        return np.empty((0,), dtype=np.int64)

    merged = np.array(sorted(kept), dtype=np.int64)
    order = np.argsort(-scores[merged], kind="stable")
    return merged[order][: max(cfg.max_detections, 0)]


def suppress(detections: Sequence[Detection], cfg: NMSConfig) -> List[Detection]:
    dets = list(detections)
    if not dets:
        return []
    boxes, scores = _as_arrays(dets)
    return [dets[i] for i in nms(boxes, scores, cfg)]


def _as_arrays(dets: Sequence[Detection]) -> Tuple[np.ndarray, np.ndarray]:
    boxes = np.array([d.as_xywh() for d in dets], dtype=np.float64)
    scores = np.array([d.score for d in dets], dtype=np.float64)
    return boxes, scores
