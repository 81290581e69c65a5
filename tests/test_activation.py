import unittest

import numpy as np

from grid_yolo.activation import ActivationMode, ActivationTransform, sigmoid, softmax
from grid_yolo.errors import InvalidConfiguration
from grid_yolo.types import AnchorPrior


class TestSigmoid(unittest.TestCase):
    def test_zero_is_half(self) -> None:
        self.assertEqual(sigmoid(0.0), 0.5)

    def test_strictly_increasing(self) -> None:
        x = np.linspace(-20.0, 20.0, 401)
        y = sigmoid(x)
        self.assertTrue(np.all(np.diff(y) > 0))

    def test_extremes_do_not_overflow(self) -> None:
        with np.errstate(over="raise"):
            y = sigmoid(np.array([-1e6, -800.0, 800.0, 1e6]))
        self.assertTrue(np.all(np.isfinite(y)))
        self.assertAlmostEqual(float(y[0]), 0.0)
        self.assertAlmostEqual(float(y[-1]), 1.0)

    def test_preserves_shape(self) -> None:
        self.assertEqual(sigmoid(np.zeros((2, 3))).shape, (2, 3))


class TestSoftmax(unittest.TestCase):
    def test_sums_to_one(self) -> None:
        rng = np.random.default_rng(7)
        for _ in range(20):
            v = rng.normal(0.0, 50.0, size=int(rng.integers(1, 30)))
            self.assertAlmostEqual(float(np.sum(softmax(v))), 1.0, delta=1e-5)

    def test_large_magnitudes(self) -> None:
        v = np.array([1e6, -1e6, 1e6 - 1.0, 0.0])
        with np.errstate(over="raise", invalid="raise"):
            p = softmax(v)
        self.assertTrue(np.all(np.isfinite(p)))
        self.assertAlmostEqual(float(np.sum(p)), 1.0, delta=1e-5)
        self.assertEqual(int(np.argmax(p)), 0)

    def test_along_axis(self) -> None:
        p = softmax(np.array([[0.0, 0.0], [0.0, np.log(3.0)]]), axis=1)
        self.assertTrue(np.allclose(p, [[0.5, 0.5], [0.25, 0.75]]))


class TestActivationTransform(unittest.TestCase):
    def setUp(self) -> None:
        self.anchors = (AnchorPrior(1.0, 2.0), AnchorPrior(3.0, 0.5))

    def test_raw_mode(self) -> None:
        t = ActivationTransform("raw", self.anchors)
        dx, dy = t.offsets(np.array([0.0]), np.array([0.0]))
        self.assertTrue(np.allclose(dx, 0.5) and np.allclose(dy, 0.5))

        dw, dh = t.sizes(np.array([0.0, np.log(2.0)]), np.array([0.0, 0.0]), np.array([0, 1]))
        self.assertTrue(np.allclose(dw, [1.0, 6.0]))
        self.assertTrue(np.allclose(dh, [2.0, 0.5]))

        self.assertAlmostEqual(float(t.objectness(0.0)), 0.5)
        self.assertTrue(np.allclose(t.class_scores(np.array([0.0, 0.0])), [0.5, 0.5]))

    def test_pre_activated_mode_is_identity(self) -> None:
        t = ActivationTransform(ActivationMode.PRE_ACTIVATED, self.anchors)
        dw, dh = t.sizes(np.array([1.5]), np.array([2.5]), np.array([1]))
        self.assertTrue(np.allclose(dw, 1.5) and np.allclose(dh, 2.5))
        self.assertTrue(np.allclose(t.class_scores(np.array([0.1, 0.9])), [0.1, 0.9]))
        self.assertAlmostEqual(float(t.objectness(0.9)), 0.9)

    def test_mode_parsing(self) -> None:
        self.assertIs(ActivationMode.parse("pre-activated"), ActivationMode.PRE_ACTIVATED)
        self.assertIs(ActivationMode.parse("RAW"), ActivationMode.RAW)
        with self.assertRaises(InvalidConfiguration):
            ActivationMode.parse("logits")


if __name__ == "__main__":
    unittest.main()
