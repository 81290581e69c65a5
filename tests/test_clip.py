import unittest

import numpy as np

from grid_yolo.clip import clip_box, clip_boxes, clip_xywh
from grid_yolo.types import Detection


def _det(x: float, y: float, w: float, h: float) -> Detection:
    return Detection(x=x, y=y, width=w, height=h, score=0.9, class_id=3, label="boat")


class TestClip(unittest.TestCase):
    def test_inside_unchanged(self) -> None:
        det = _det(10, 20, 30, 40)
        self.assertIs(clip_box(det, 100, 100), det)

    def test_left_top_overflow_shrinks(self) -> None:
        out = clip_box(_det(-20, -5, 60, 30), 100, 100)
        self.assertEqual(out.as_xywh(), (0.0, 0.0, 40.0, 25.0))
        self.assertEqual((out.score, out.class_id, out.label), (0.9, 3, "boat"))

    def test_right_bottom_overflow_truncates(self) -> None:
        out = clip_box(_det(80, 90, 50, 50), 100, 120)
        self.assertEqual(out.as_xywh(), (80.0, 90.0, 20.0, 30.0))

    def test_both_sides(self) -> None:
        out = clip_box(_det(-10, -10, 300, 300), 100, 50)
        self.assertEqual(out.as_xywh(), (0.0, 0.0, 100.0, 50.0))

    def test_degenerate_passthrough(self) -> None:
        # entirely left of the image: width ends up negative, box is kept
        out = clip_box(_det(-50, 10, 20, 20), 100, 100)
        self.assertEqual(out.x, 0.0)
        self.assertEqual(out.width, -30.0)
        self.assertEqual(out.area, 0.0)

    def test_clip_boxes_keeps_order(self) -> None:
        dets = [_det(-1, 0, 10, 10), _det(95, 0, 10, 10)]
        out = clip_boxes(dets, 100, 100)
        self.assertEqual([d.as_xywh() for d in out], [(0.0, 0.0, 9.0, 10.0), (95.0, 0.0, 5.0, 10.0)])

    def test_array_form_matches_clip_box(self) -> None:
        boxes = [(-20, -5, 60, 30), (80, 90, 50, 50), (-10, -10, 300, 300), (-50, 10, 20, 20), (10, 20, 30, 40)]
        out = clip_xywh(np.array(boxes, dtype=np.float32), 100, 120)
        expected = [clip_box(_det(*b), 100, 120).as_xywh() for b in boxes]
        self.assertTrue(np.allclose(out, expected))


if __name__ == "__main__":
    unittest.main()
