from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import InvalidConfiguration
from .metadata import load_class_names
from .postprocess import GridPostConfig
from .types import AnchorPrior, GridDescriptor

logger = logging.getLogger(__name__)

_TOP_LEVEL_KEYS = {
    "schema_version",
    "grid",
    "anchors",
    "labels",
    "labels_path",
    "activation_mode",
    "conf_threshold",
    "iou_threshold",
    "max_detections",
    "apply_nms",
    "class_agnostic_nms",
    "class_ids",
    "clip",
}

_GRID_KEYS = {
    "grid_width",
    "grid_height",
    "anchor_count",
    "class_count",
    "image_width",
    "image_height",
    "integer_cell_size",
}


def _require_number(payload: Dict[str, Any], key: str) -> float:
    if key not in payload:
        raise InvalidConfiguration(f"Missing required key: {key}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfiguration(f"{key} must be a number")
    return float(value)


def _require_int(payload: Dict[str, Any], key: str) -> int:
    if key not in payload:
        raise InvalidConfiguration(f"Missing required key: {key}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{key} must be an integer")
    return int(value)


def _optional_bool(payload: Dict[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise InvalidConfiguration(f"{key} must be true or false")
    return value


def _parse_anchors(value: Any) -> Tuple[AnchorPrior, ...]:
    if not isinstance(value, list) or not value:
        raise InvalidConfiguration("anchors must be a non-empty list of [width, height] pairs")
    anchors: List[AnchorPrior] = []
    for i, pair in enumerate(value):
        if (
            not isinstance(pair, (list, tuple))
            or len(pair) != 2
            or any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in pair)
        ):
            raise InvalidConfiguration(f"anchors[{i}] must be a [width, height] pair of numbers")
        anchors.append(AnchorPrior(float(pair[0]), float(pair[1])))
    return tuple(anchors)


def _parse_labels(payload: Dict[str, Any], base_dir: Optional[Path]) -> Tuple[str, ...]:
    if "labels" in payload and "labels_path" in payload:
        raise InvalidConfiguration("Use either 'labels' or 'labels_path', not both.")
    if "labels_path" in payload:
        raw = payload["labels_path"]
        if not isinstance(raw, str) or not raw.strip():
            raise InvalidConfiguration("labels_path must be a non-empty string")
        path = Path(raw)
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        if not path.exists():
            raise FileNotFoundError(f"Label file not found: {path}")
        return tuple(load_class_names(path))

    labels = payload.get("labels")
    if not isinstance(labels, list) or not all(isinstance(item, str) for item in labels):
        raise InvalidConfiguration("labels must be a list of strings (or set labels_path)")
    return tuple(labels)


def _parse_grid(value: Any, anchor_count: int, class_count: int) -> GridDescriptor:
    if not isinstance(value, dict):
        raise InvalidConfiguration("grid must be an object")
    unknown = sorted(set(value.keys()) - _GRID_KEYS)
    if unknown:
        raise InvalidConfiguration(f"Unknown grid keys: {unknown}")

    return GridDescriptor(
        grid_width=_require_int(value, "grid_width"),
        grid_height=_require_int(value, "grid_height"),
        anchor_count=_require_int(value, "anchor_count") if "anchor_count" in value else anchor_count,
        class_count=_require_int(value, "class_count") if "class_count" in value else class_count,
        image_width=_require_int(value, "image_width"),
        image_height=_require_int(value, "image_height"),
        integer_cell_size=_optional_bool(value, "integer_cell_size", False),
    )


def parse_post_config(payload: Dict[str, Any], base_dir: Optional[Path] = None) -> GridPostConfig:
    """
    Build a `GridPostConfig` from a decoded JSON object.

    `grid.anchor_count` and `grid.class_count` default to the lengths of
    `anchors` and the labels. Relative `labels_path` values resolve against
    `base_dir`.
    """

    if not isinstance(payload, dict):
        raise InvalidConfiguration("Decoder config must be a JSON object")
    unknown = sorted(set(payload.keys()) - _TOP_LEVEL_KEYS)
    if unknown:
        raise InvalidConfiguration(f"Unknown decoder config keys: {unknown}")
    if _require_int(payload, "schema_version") != 1:
        raise InvalidConfiguration("decoder config schema_version must be 1")

    anchors = _parse_anchors(payload.get("anchors"))
    labels = _parse_labels(payload, base_dir)
    if "grid" not in payload:
        raise InvalidConfiguration("Missing required key: grid")
    grid = _parse_grid(payload["grid"], anchor_count=len(anchors), class_count=len(labels))

    kwargs: Dict[str, Any] = {}
    for key in ("conf_threshold", "iou_threshold"):
        if key in payload:
            kwargs[key] = _require_number(payload, key)
    if "max_detections" in payload:
        kwargs["max_detections"] = _require_int(payload, "max_detections")
    for key in ("apply_nms", "class_agnostic_nms", "clip"):
        if key in payload:
            kwargs[key] = _optional_bool(payload, key, True)
    if "activation_mode" in payload:
        kwargs["activation_mode"] = payload["activation_mode"]
    if payload.get("class_ids") is not None:
        class_ids = payload["class_ids"]
        if not isinstance(class_ids, list) or any(isinstance(c, bool) or not isinstance(c, int) for c in class_ids):
            raise InvalidConfiguration("class_ids must be a list of integers")
        kwargs["class_ids"] = tuple(class_ids)

    return GridPostConfig(grid=grid, anchors=anchors, labels=labels, **kwargs)


def load_post_config(path: Union[str, Path]) -> GridPostConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Decoder config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidConfiguration(f"Invalid decoder config JSON: {path}") from exc

    cfg = parse_post_config(payload, base_dir=path.parent)
    logger.debug(
        "loaded decoder config from %s (%dx%d grid, %d anchors, %d classes)",
        path,
        cfg.grid.grid_width,
        cfg.grid.grid_height,
        cfg.grid.anchor_count,
        cfg.grid.class_count,
    )
    return cfg
