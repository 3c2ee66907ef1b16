"""Sphere sampling tests"""

import numpy as np

from planet_generator.sampling import fibonacci_unit_directions, generate_fibonacci_points


class TestFibonacciSampling:
    """Golden-angle spiral sampling"""

    def setup_method(self):
        self.radius_km = 6370.0

    def test_point_count_and_dtype(self):
        points = generate_fibonacci_points(1000, self.radius_km)

        assert points.shape == (1000, 3)
        assert points.dtype == np.float32

    def test_points_lie_on_sphere(self):
        points = generate_fibonacci_points(5000, self.radius_km)
        radii = np.linalg.norm(points.astype(np.float64), axis=1)

        assert np.allclose(radii, self.radius_km, rtol=1e-5)

    def test_vertical_bands_are_uniform(self):
        num_points, num_bins = 20000, 20
        points = generate_fibonacci_points(num_points, self.radius_km)
        y = points[:, 1].astype(np.float64) / self.radius_km

        counts, _ = np.histogram(y, bins=num_bins, range=(-1.0, 1.0))
        expected = num_points / num_bins

        assert counts.sum() == num_points
        assert np.all(np.abs(counts - expected) <= 0.2 * expected)

    def test_deterministic(self):
        a = generate_fibonacci_points(2048, self.radius_km)
        b = generate_fibonacci_points(2048, self.radius_km)

        assert np.array_equal(a, b)

    def test_non_positive_count_is_empty(self):
        for n in (0, -1, -100):
            points = generate_fibonacci_points(n, self.radius_km)
            assert points.shape == (0, 3)

    def test_single_point_sits_on_equator(self):
        points = generate_fibonacci_points(1, self.radius_km)

        assert np.allclose(points[0], [self.radius_km, 0.0, 0.0])

    def test_first_and_last_points_are_near_opposite_poles(self):
        directions = fibonacci_unit_directions(100)

        assert directions[0, 1] > 0.98
        assert directions[-1, 1] < -0.98
        assert np.allclose(np.linalg.norm(directions, axis=1), 1.0)

    def test_radius_scales_points(self):
        unit = generate_fibonacci_points(300, 1.0).astype(np.float64)
        scaled = generate_fibonacci_points(300, 10.0).astype(np.float64)

        assert np.allclose(scaled, unit * 10.0, atol=1e-5)
