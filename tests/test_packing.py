import unittest

import numpy as np

from treerings.packing import _push_apart_siblings, enclose_circles, pack_siblings


class TestPackSiblings(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        np.random.seed(636)
        cls.radii = np.sort(np.random.uniform(0.5, 5.0, size=60))[::-1]

    def test_empty_and_single(self):
        centers, radius = pack_siblings([])
        self.assertEqual(centers.shape, (0, 2))
        self.assertEqual(radius, 0.0)

        centers, radius = pack_siblings([3.0])
        np.testing.assert_array_equal(centers, [[0.0, 0.0]])
        self.assertEqual(radius, 3.0)

    def test_two_circles_are_tangent_and_centred(self):
        centers, radius = pack_siblings([2.0, 1.0])
        np.testing.assert_allclose(np.linalg.norm(centers[0] - centers[1]), 3.0, atol=1e-9)
        np.testing.assert_allclose(radius, 3.0, atol=1e-9)

    def test_no_overlaps(self):
        centers, _ = pack_siblings(self.radii)
        r = self.radii
        for i in range(len(r)):
            for j in range(i + 1, len(r)):
                d = np.linalg.norm(centers[i] - centers[j])
                self.assertGreaterEqual(d, r[i] + r[j] - 1e-7)

    def test_all_circles_inside_enclosure(self):
        centers, radius = pack_siblings(self.radii)
        reach = np.linalg.norm(centers, axis=1) + self.radii
        self.assertTrue(np.all(reach <= radius * (1 + 1e-7)))

    def test_deterministic(self):
        first = pack_siblings(self.radii)
        second = pack_siblings(self.radii)
        np.testing.assert_array_equal(first[0], second[0])
        self.assertEqual(first[1], second[1])

    def test_equal_radii(self):
        centers, radius = pack_siblings(np.ones(7))
        # 3 is the optimum (hexagonal packing)
        self.assertGreaterEqual(radius, 3.0 - 1e-7)
        self.assertLess(radius, 3.7)
        self.assertEqual(centers.shape, (7, 2))


class TestEncloseCircles(unittest.TestCase):
    def test_two_points(self):
        x, y, r = enclose_circles(np.array([[0.0, 0.0], [2.0, 0.0]]), [0.0, 0.0])
        np.testing.assert_allclose([x, y, r], [1.0, 0.0, 1.0], atol=1e-9)

    def test_circle_inside_another(self):
        x, y, r = enclose_circles(np.array([[0.0, 0.0], [0.5, 0.0]]), [3.0, 1.0])
        np.testing.assert_allclose([x, y, r], [0.0, 0.0, 3.0], atol=1e-9)

    def test_contains_random_circles(self):
        rng = np.random.default_rng(1)
        centers = rng.normal(size=(40, 2)) * 10
        radii = rng.uniform(0.1, 2.0, size=40)
        x, y, r = enclose_circles(centers, radii)

        reach = np.linalg.norm(centers - [x, y], axis=1) + radii
        self.assertTrue(np.all(reach <= r * (1 + 1e-7)))
        # at least one circle touches the boundary
        self.assertAlmostEqual(reach.max(), r, places=6)

    def test_empty(self):
        self.assertEqual(enclose_circles(np.empty((0, 2)), []), (0.0, 0.0, 0.0))


class TestPushApartSiblings(unittest.TestCase):
    def test_overlapping_pair_is_separated_and_large_circle_barely_moves(self):
        centers = np.array([[0.0, 0.0], [2.5, 0.0]])
        radii = np.array([3.0, 1.0])
        moved = _push_apart_siblings(centers, radii)

        self.assertGreaterEqual(np.linalg.norm(moved[0] - moved[1]), 4.0 - 1e-9)
        shift_large = np.linalg.norm(moved[0] - centers[0])
        shift_small = np.linalg.norm(moved[1] - centers[1])
        self.assertLess(shift_large, shift_small)
        # the input is not modified
        np.testing.assert_array_equal(centers, [[0.0, 0.0], [2.5, 0.0]])

    def test_coincident_centres(self):
        moved = _push_apart_siblings(np.zeros((2, 2)), np.array([1.0, 1.0]))
        np.testing.assert_allclose(moved[:, 1], 0.0)
        self.assertGreaterEqual(abs(moved[0, 0] - moved[1, 0]), 2.0 - 1e-9)

    def test_separated_circles_are_untouched(self):
        centers = np.array([[0.0, 0.0], [5.0, 0.0], [0.0, 5.0]])
        moved = _push_apart_siblings(centers, np.ones(3))
        np.testing.assert_array_equal(moved, centers)
