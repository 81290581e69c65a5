"""
Known model layouts.

Tiny YOLOv2 (PASCAL VOC): 416x416 input, 13x13 grid, 5 anchors, 20 classes.
Its ONNX export leaves activations to the host, so the preset uses raw mode.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from .activation import ActivationMode
from .postprocess import GridPostConfig, build_post_config
from .types import GridDescriptor

VOC_LABELS: Tuple[str, ...] = (
    "aeroplane",
    "bicycle",
    "bird",
    "boat",
    "bottle",
    "bus",
    "car",
    "cat",
    "chair",
    "cow",
    "diningtable",
    "dog",
    "horse",
    "motorbike",
    "person",
    "pottedplant",
    "sheep",
    "sofa",
    "train",
    "tvmonitor",
)

TINY_YOLOV2_VOC_ANCHORS: Tuple[Tuple[float, float], ...] = (
    (1.08, 1.19),
    (3.42, 4.41),
    (6.63, 11.38),
    (9.42, 5.11),
    (16.62, 10.52),
)


def tiny_yolov2_voc(
    image_width: int = 416,
    image_height: int = 416,
    **overrides,
) -> GridPostConfig:
    grid = GridDescriptor(
        grid_width=13,
        grid_height=13,
        anchor_count=len(TINY_YOLOV2_VOC_ANCHORS),
        class_count=len(VOC_LABELS),
        image_width=image_width,
        image_height=image_height,
    )
    overrides.setdefault("activation_mode", ActivationMode.RAW)
    return build_post_config(grid, TINY_YOLOV2_VOC_ANCHORS, VOC_LABELS, **overrides)


PRESETS: Dict[str, Callable[..., GridPostConfig]] = {
    "tiny-yolov2-voc": tiny_yolov2_voc,
}


def get_preset(name: str, **overrides) -> GridPostConfig:
    try:
        factory = PRESETS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown preset {name!r}; choose from {sorted(PRESETS)}") from None
    return factory(**overrides)
