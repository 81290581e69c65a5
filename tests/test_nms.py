import unittest

import numpy as np

from grid_yolo.nms import NMSConfig, batched_nms, iou, nms, select_topk, suppress
from grid_yolo.types import Detection


class TestIoU(unittest.TestCase):
    def test_identical(self) -> None:
        self.assertAlmostEqual(iou((0, 0, 10, 10), (0, 0, 10, 10)), 1.0)

    def test_disjoint(self) -> None:
        self.assertEqual(iou((0, 0, 10, 10), (20, 20, 5, 5)), 0.0)

    def test_touching_edges(self) -> None:
        self.assertEqual(iou((0, 0, 10, 10), (10, 0, 10, 10)), 0.0)

    def test_half_overlap(self) -> None:
        self.assertAlmostEqual(iou((0, 0, 10, 10), (0, 0, 10, 5)), 0.5)

    def test_degenerate_box(self) -> None:
        self.assertEqual(iou((0, 0, 0, 10), (0, 0, 10, 10)), 0.0)
        self.assertEqual(iou((0, 0, 10, 10), (2, 2, 5, -3)), 0.0)
        self.assertEqual(iou((5, 5, 0, 0), (5, 5, 0, 0)), 0.0)


class TestNMS(unittest.TestCase):
    def test_duplicate_suppressed(self) -> None:
        boxes = np.array([[10, 10, 50, 50], [10, 10, 50, 50]], dtype=np.float32)
        scores = np.array([0.8, 0.9], dtype=np.float32)
        keep = nms(boxes, scores, NMSConfig(iou_threshold=0.99, max_detections=10))
        self.assertEqual(keep.tolist(), [1])

    def test_limit_keeps_highest(self) -> None:
        boxes = np.array([[i * 100, 0, 50, 50] for i in range(5)], dtype=np.float32)
        scores = np.array([0.5, 0.9, 0.7, 0.8, 0.6], dtype=np.float32)
        keep = nms(boxes, scores, NMSConfig(iou_threshold=0.5, max_detections=3))
        self.assertEqual(keep.tolist(), [1, 3, 2])

    def test_threshold_is_exclusive(self) -> None:
        boxes = np.array([[0, 0, 10, 10], [0, 0, 10, 5]], dtype=np.float32)
        scores = np.array([0.9, 0.8])
        self.assertEqual(nms(boxes, scores, NMSConfig(iou_threshold=0.5)).tolist(), [0, 1])
        self.assertEqual(nms(boxes, scores, NMSConfig(iou_threshold=0.49)).tolist(), [0])

    def test_ties_keep_input_order(self) -> None:
        boxes = np.array([[0, 0, 10, 10], [0, 0, 10, 10], [0, 0, 10, 10]], dtype=np.float32)
        scores = np.array([0.7, 0.7, 0.7])
        self.assertEqual(nms(boxes, scores, NMSConfig(iou_threshold=0.5)).tolist(), [0])

    def test_degenerate_boxes_never_suppress(self) -> None:
        boxes = np.array([[0, 0, 0, 0], [0, 0, 10, 10], [0, 0, 10, 0]], dtype=np.float32)
        scores = np.array([0.9, 0.8, 0.7])
        self.assertEqual(nms(boxes, scores, NMSConfig(iou_threshold=0.1)).tolist(), [0, 1, 2])

    def test_empty_and_zero_limit(self) -> None:
        self.assertEqual(nms(np.empty((0, 4)), np.empty((0,)), NMSConfig()).size, 0)
        boxes = np.array([[0, 0, 10, 10]], dtype=np.float32)
        self.assertEqual(nms(boxes, np.array([0.9]), NMSConfig(max_detections=0)).size, 0)

    def test_chain_suppression(self) -> None:
        # B overlaps A and C, but A and C do not overlap; suppressing B frees C
        boxes = np.array([[0, 0, 10, 10], [5, 0, 10, 10], [10, 0, 10, 10]], dtype=np.float32)
        scores = np.array([0.9, 0.8, 0.7])
        self.assertEqual(nms(boxes, scores, NMSConfig(iou_threshold=0.3)).tolist(), [0, 2])

    def test_result_is_pairwise_non_overlapping(self) -> None:
        rng = np.random.default_rng(3)
        xy = rng.uniform(0, 200, size=(120, 2))
        wh = rng.uniform(5, 60, size=(120, 2))
        boxes = np.hstack([xy, wh])
        scores = rng.uniform(0, 1, size=120)
        thr = 0.4
        keep = nms(boxes, scores, NMSConfig(iou_threshold=thr, max_detections=1000))

        self.assertGreater(keep.size, 0)
        self.assertEqual(len(set(keep.tolist())), keep.size)
        kept_scores = scores[keep]
        self.assertTrue(np.all(np.diff(kept_scores) <= 0))
        for i in range(keep.size):
            for j in range(i + 1, keep.size):
                self.assertLessEqual(iou(boxes[keep[i]], boxes[keep[j]]), thr)

    def test_batched_nms_is_per_class(self) -> None:
        boxes = np.array([[0, 0, 10, 10], [0, 0, 10, 10], [0, 0, 10, 10]], dtype=np.float32)
        scores = np.array([0.6, 0.9, 0.8])
        class_ids = np.array([0, 1, 1])
        keep = batched_nms(boxes, scores, class_ids, NMSConfig(iou_threshold=0.5))
        self.assertEqual(keep.tolist(), [1, 0])

    def test_select_topk(self) -> None:
        self.assertEqual(select_topk(np.array([0.1, 0.5, 0.3]), 2).tolist(), [1, 2])
        self.assertEqual(select_topk(np.array([0.1]), 0).size, 0)

    def test_suppress_detections(self) -> None:
        dets = [
            Detection(x=10, y=10, width=50, height=50, score=0.9, class_id=0, label="a"),
            Detection(x=10, y=10, width=50, height=50, score=0.8, class_id=0, label="a"),
            Detection(x=200, y=10, width=50, height=50, score=0.7, class_id=1, label="b"),
        ]
        kept = suppress(dets, NMSConfig(iou_threshold=0.5))
        self.assertEqual([d.score for d in kept], [0.9, 0.7])
        self.assertEqual(suppress([], NMSConfig()), [])


if __name__ == "__main__":
    unittest.main()
