"""Seeded random stream tests"""

import numpy as np

from planet_generator.random_stream import PlanetRandom, derive_seed


class TestPlanetRandom:

    def test_same_seed_same_sequence(self):
        a = PlanetRandom(42)
        b = PlanetRandom(42)

        assert np.array_equal(a.frand_range(0.0, 1.0, 10), b.frand_range(0.0, 1.0, 10))
        assert a.rand_range(0, 1000) == b.rand_range(0, 1000)

    def test_negative_seeds_are_accepted(self):
        values = PlanetRandom(-5).frand_range(0.0, 1.0, 3)

        assert np.all((values >= 0.0) & (values < 1.0))

    def test_frand_range_bounds(self):
        values = PlanetRandom(3).frand_range(-0.2, 0.2, 1000)

        assert np.all(values >= -0.2)
        assert np.all(values < 0.2)

    def test_rand_range_is_inclusive(self):
        rng = PlanetRandom(11)
        draws = {rng.rand_range(0, 2) for _ in range(200)}

        assert draws == {0, 1, 2}

    def test_random_axis_is_unit_length(self):
        rng = PlanetRandom(8)

        for _ in range(20):
            assert abs(np.linalg.norm(rng.random_axis(0.01)) - 1.0) < 1e-12

    def test_random_axis_rejects_short_draws(self):
        # With the threshold at 1, only draws outside the unit ball pass.
        rng = PlanetRandom(8)
        reference = np.random.default_rng(8)

        axis = rng.random_axis(1.0)

        while True:
            v = reference.uniform(-1.0, 1.0, 3)
            if np.dot(v, v) >= 1.0:
                break
        assert np.allclose(axis, v / np.linalg.norm(v))

    def test_shuffle_is_a_permutation(self):
        values = PlanetRandom(1).shuffle(list(range(50)))

        assert sorted(values) == list(range(50))
        assert values != list(range(50))

    def test_shuffle_is_deterministic(self):
        assert PlanetRandom(9).shuffle(list(range(20))) == PlanetRandom(9).shuffle(list(range(20)))


class TestDeriveSeed:

    def test_formula(self):
        assert derive_seed(1337, 1000, 3, 10007) == 1337 + 1000 + 3 * 10007
        assert derive_seed(5) == 5

    def test_plates_get_distinct_seeds(self):
        seeds = {derive_seed(1337, 1000, i, 10007) for i in range(100)}

        assert len(seeds) == 100
