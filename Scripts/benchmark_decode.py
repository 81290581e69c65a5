from __future__ import annotations

import argparse
import time
from dataclasses import replace

import numpy as np

from grid_yolo import GridPostprocessor, get_preset


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark grid decode + NMS on random raw outputs.")
    parser.add_argument("--preset", default="tiny-yolov2-voc")
    parser.add_argument("--conf", type=float, default=0.3)
    parser.add_argument("--iou", type=float, default=0.45)
    parser.add_argument("--repeats", type=int, default=200)
    parser.add_argument("--warmup", type=int, default=10)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()
    if args.repeats < 1:
        raise ValueError("--repeats must be >= 1")

    cfg = replace(get_preset(args.preset), conf_threshold=args.conf, iou_threshold=args.iou)
    post = GridPostprocessor(cfg)
    rng = np.random.default_rng(args.seed)
    # Logits spread wide enough that a few cells clear both confidence gates.
    tensors = rng.normal(0.0, 2.0, size=(args.warmup + args.repeats, cfg.grid.expected_length)).astype(np.float32)

    for t in tensors[: args.warmup]:
        post.process(t)

    elapsed_ms = np.empty(args.repeats)
    kept = np.empty(args.repeats, dtype=np.int64)
    for i, t in enumerate(tensors[args.warmup :]):
        start = time.perf_counter()
        kept[i] = len(post.process(t))
        elapsed_ms[i] = (time.perf_counter() - start) * 1000.0

    p50, p90, p95 = np.percentile(elapsed_ms, [50, 90, 95])
    print(
        f"preset={args.preset} n={args.repeats} mean={elapsed_ms.mean():.3f}ms "
        f"p50={p50:.3f}ms p90={p90:.3f}ms p95={p95:.3f}ms"
    )
    print(f"detections/frame: mean={kept.mean():.1f} max={kept.max()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
