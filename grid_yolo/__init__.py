"""
Decode pipeline for grid/anchor object detectors (YOLOv2 style heads).

Turns the flat channel-major output of a network into a deduplicated list of
labelled boxes in image pixels. Framework-agnostic: input is a NumPy array or
any float sequence. OpenCV is only needed for drawing.
"""

from .activation import ActivationMode, ActivationTransform, sigmoid, softmax
from .clip import clip_box, clip_boxes
from .config import load_post_config, parse_post_config
from .decode import BoxDecoder
from .errors import GridYoloError, InvalidConfiguration, ShapeMismatch
from .indexing import TensorIndexer
from .metadata import load_class_names
from .nms import NMSConfig, iou, nms, suppress
from .postprocess import GridPostConfig, GridPostprocessor, build_post_config, decode_detections
from .presets import get_preset, tiny_yolov2_voc
from .runtime import GridYoloPipeline, check_output_shape, load_pipeline
from .types import AnchorPrior, Detection, GridDescriptor
from .visualize import draw_detections

__all__ = [
    "ActivationMode",
    "ActivationTransform",
    "sigmoid",
    "softmax",
    "clip_box",
    "clip_boxes",
    "load_post_config",
    "parse_post_config",
    "BoxDecoder",
    "GridYoloError",
    "InvalidConfiguration",
    "ShapeMismatch",
    "TensorIndexer",
    "load_class_names",
    "NMSConfig",
    "iou",
    "nms",
    "suppress",
    "GridPostConfig",
    "GridPostprocessor",
    "build_post_config",
    "decode_detections",
    "get_preset",
    "tiny_yolov2_voc",
    "GridYoloPipeline",
    "check_output_shape",
    "load_pipeline",
    "AnchorPrior",
    "Detection",
    "GridDescriptor",
    "draw_detections",
]
