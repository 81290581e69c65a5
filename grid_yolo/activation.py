from __future__ import annotations

from enum import Enum
from typing import Sequence, Tuple, Union

import numpy as np

from .errors import InvalidConfiguration
from .types import AnchorPrior

ArrayLike = Union[float, np.ndarray]

# exp() argument cap for raw size logits; e**10 cells is far past any image.
MAX_LOG_SIZE = 10.0


class ActivationMode(str, Enum):
    # RAW: logits straight from the network; PRE_ACTIVATED: the graph already
    # applied sigmoid/exp/softmax and folded in the anchor priors.
    RAW = "raw"
    PRE_ACTIVATED = "pre_activated"

    @classmethod
    def parse(cls, value: Union[str, "ActivationMode"]) -> "ActivationMode":
        if isinstance(value, ActivationMode):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError as exc:
            allowed = [m.value for m in cls]
            raise InvalidConfiguration(f"activation_mode must be one of {allowed} (got {value!r})") from exc


def sigmoid(x: ArrayLike) -> ArrayLike:
    """
    Logistic function, evaluated without overflow for large |x|.
    """

    arr = np.asarray(x, dtype=np.float64)
    flat = np.atleast_1d(arr)
    out = np.empty_like(flat)
    pos = flat >= 0
    out[pos] = 1.0 / (1.0 + np.exp(-flat[pos]))
    ex = np.exp(flat[~pos])
    out[~pos] = ex / (1.0 + ex)
    if arr.ndim == 0:
        return float(out[0])
    return out.reshape(arr.shape)


def softmax(x: ArrayLike, axis: int = -1) -> np.ndarray:
    arr = np.asarray(x, dtype=np.float64)
    shifted = arr - np.max(arr, axis=axis, keepdims=True)
    ex = np.exp(shifted)
    return ex / np.sum(ex, axis=axis, keepdims=True)


class ActivationTransform:
    """
    Turns raw channel values into the ranges the decoder expects.

    - offsets: fraction of a cell from the cell's top-left corner
    - sizes: multiples of the cell size, anchor prior included
    - objectness / class scores: probabilities
    """

    def __init__(self, mode: Union[str, ActivationMode], anchors: Sequence[AnchorPrior]):
        self.mode = ActivationMode.parse(mode)
        self.anchors = tuple(anchors)

    @property
    def is_raw(self) -> bool:
        return self.mode is ActivationMode.RAW

    def objectness(self, tc: ArrayLike) -> ArrayLike:
        return sigmoid(tc) if self.is_raw else np.asarray(tc, dtype=np.float64)

    def offsets(self, tx: ArrayLike, ty: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        if self.is_raw:
            return sigmoid(tx), sigmoid(ty)
        return np.asarray(tx, dtype=np.float64), np.asarray(ty, dtype=np.float64)

    def sizes(self, tw: ArrayLike, th: ArrayLike, anchor_index) -> Tuple[np.ndarray, np.ndarray]:
        """
        `anchor_index` may be a scalar or an array aligned with `tw`/`th`.
        Raw logits are capped at `MAX_LOG_SIZE` so sizes stay finite.
        """

        tw = np.asarray(tw, dtype=np.float64)
        th = np.asarray(th, dtype=np.float64)
        if not self.is_raw:
            return tw, th

        priors = np.asarray([(a.width, a.height) for a in self.anchors], dtype=np.float64)
        idx = np.asarray(anchor_index)
        tw = np.minimum(tw, MAX_LOG_SIZE)
        th = np.minimum(th, MAX_LOG_SIZE)
        return np.exp(tw) * priors[idx, 0], np.exp(th) * priors[idx, 1]

    def class_scores(self, scores: ArrayLike, axis: int = -1) -> np.ndarray:
        if self.is_raw:
            return softmax(scores, axis=axis)
        return np.asarray(scores, dtype=np.float64)
