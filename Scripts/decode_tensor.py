from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from grid_yolo import GridPostConfig, GridPostprocessor, get_preset, load_post_config


def load_raw_tensor(path: Path) -> np.ndarray:
    """
    Read a raw network output: `.npy`, or text with comma/whitespace separated floats.
    """

    if not path.exists():
        raise FileNotFoundError(f"Tensor file not found: {path}")
    if path.suffix.lower() == ".npy":
        return np.load(path).astype(np.float32).reshape(-1)
    text = path.read_text(encoding="utf-8").replace(",", " ")
    return np.array([float(tok) for tok in text.split()], dtype=np.float32)


def _build_config(args: argparse.Namespace) -> GridPostConfig:
    if args.config:
        cfg = load_post_config(Path(args.config))
    else:
        cfg = get_preset(args.preset)

    overrides = {}
    if args.conf is not None:
        overrides["conf_threshold"] = args.conf
    if args.iou is not None:
        overrides["iou_threshold"] = args.iou
    if args.max_det is not None:
        overrides["max_detections"] = args.max_det
    if args.mode is not None:
        overrides["activation_mode"] = args.mode
    if args.no_nms:
        overrides["apply_nms"] = False
    if args.per_class_nms:
        overrides["class_agnostic_nms"] = False
    return dataclasses.replace(cfg, **overrides) if overrides else cfg


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Decode a raw grid detector output into boxes (JSON lines).")
    parser.add_argument("tensor", help="Raw output (.npy or text of floats).")
    src = parser.add_mutually_exclusive_group()
    src.add_argument("--config", default=None, help="Decoder config JSON.")
    src.add_argument("--preset", default="tiny-yolov2-voc", help="Built-in model layout (default: tiny-yolov2-voc).")
    parser.add_argument("--mode", choices=["raw", "pre_activated"], default=None, help="Override activation mode.")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold.")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold for NMS.")
    parser.add_argument("--max-det", type=int, default=None, help="Maximum detections to keep.")
    parser.add_argument("--no-nms", action="store_true", help="Disable NMS and only keep top-K detections by score.")
    parser.add_argument("--per-class-nms", action="store_true", help="Run NMS separately per class.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = _build_config(args)
        tensor = load_raw_tensor(Path(args.tensor))
        detections = GridPostprocessor(cfg).process(tensor)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    lines: List[str] = [json.dumps(det.to_dict()) for det in detections]
    if lines:
        print("\n".join(lines))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
