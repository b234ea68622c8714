import unittest

import numpy as np
import pytest

from treerings.transitions import (
    Easing,
    Transition,
    ViewTransform,
    cubic_in_out,
    cubic_out,
    linear,
    quad_out,
    resolve_easing,
)


class TestViewTransform(unittest.TestCase):
    def test_apply_and_invert(self):
        transform = ViewTransform(10, -20, 2.5)
        self.assertEqual(transform.apply(4, 8), (20, 0))
        np.testing.assert_allclose(transform.invert(*transform.apply(3.3, -1.7)), (3.3, -1.7))

    def test_interpolate_endpoints(self):
        a = ViewTransform(0, 0, 1)
        b = ViewTransform(100, 50, 3)
        self.assertEqual(a.interpolate(b, 0), a)
        self.assertEqual(a.interpolate(b, 1), b)
        self.assertEqual(a.interpolate(b, 0.5), ViewTransform(50, 25, 2))


class TestTransition(unittest.TestCase):
    def setUp(self):
        self.start = ViewTransform(50, 50, 1)
        self.end = ViewTransform(-100, -200, 4)

    def test_progress_is_clamped(self):
        transition = Transition(self.start, self.end, started_at=1.0, duration_ms=300)
        self.assertEqual(transition.progress(0.5), 0.0)
        self.assertEqual(transition.progress(10.0), 1.0)
        self.assertFalse(transition.finished(1.1))
        self.assertTrue(transition.finished(1.3))

    def test_value_follows_easing(self):
        transition = Transition(self.start, self.end, 0.0, duration_ms=1000, easing=quad_out)
        self.assertTrue(
            transition.value_at(0.25).is_close(self.start.interpolate(self.end, quad_out(0.25)))
        )
        self.assertEqual(transition.value_at(1.0), self.end)

    def test_zero_duration(self):
        transition = Transition(self.start, self.end, 0.0, duration_ms=0)
        self.assertTrue(transition.finished(0.0))
        self.assertEqual(transition.value_at(0.0), self.end)


@pytest.mark.parametrize("easing", [linear, quad_out, cubic_out, cubic_in_out])
def test_easing_endpoints_and_monotonicity(easing):
    t = np.linspace(0, 1, 101)
    values = np.array([easing(x) for x in t])
    assert values[0] == pytest.approx(0)
    assert values[-1] == pytest.approx(1)
    assert np.all(np.diff(values) >= 0)


def test_cubic_out_decelerates():
    assert cubic_out(0.5) == pytest.approx(0.875)
    assert cubic_in_out(0.5) == pytest.approx(0.5)


def test_resolve_easing():
    assert resolve_easing("cubic_out") is cubic_out
    assert resolve_easing(Easing.linear) is linear
    custom = lambda t: t ** 2  # noqa: E731
    assert resolve_easing(custom) is custom
    with pytest.raises(ValueError):
        resolve_easing("bounce")
