# planet_generator/random_stream.py

"""
================================================================================
SEEDED RANDOM STREAMS
================================================================================
A small deterministic random stream built on NumPy's Generator. A stream is
always created fresh from an explicit seed by the task that uses it; nothing
in the package draws from shared or global random state.

Data Contract:
---------------
- Inputs: an integer seed (any sign; it is folded into the unsigned 64-bit
  range NumPy expects).
- Outputs: floats, integers and vectors drawn from the stream.
- Invariants: two streams built from the same seed yield identical sequences.
================================================================================
"""
import numpy as np

_SEED_MODULUS = 2 ** 64


def derive_seed(base_seed: int, offset: int = 0, index: int = 0, stride: int = 0) -> int:
    """
    Derives a task seed as a pure function of the master seed and a task id:
    base_seed + offset + index * stride.
    """
    return int(base_seed) + int(offset) + int(index) * int(stride)


class PlanetRandom:
    """Deterministic random stream seeded from a single integer."""

    def __init__(self, seed: int):
        self.seed = int(seed)
        self._rng = np.random.default_rng(self.seed % _SEED_MODULUS)

    def frand_range(self, low: float, high: float, size=None):
        """Uniform float(s) in [low, high)."""
        return self._rng.uniform(low, high, size)

    def rand_range(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends inclusive."""
        return int(self._rng.integers(low, high, endpoint=True))

    def random_axis(self, min_length_squared: float) -> np.ndarray:
        """
        Unit vector from a draw in the cube [-1, 1)^3. Draws shorter than
        sqrt(min_length_squared) are rejected and redrawn.
        """
        while True:
            v = self._rng.uniform(-1.0, 1.0, 3)
            if float(np.dot(v, v)) >= min_length_squared:
                return v / np.linalg.norm(v)

    def shuffle(self, values: list) -> list:
        """In-place Fisher-Yates shuffle, walking from the last element down."""
        for i in range(len(values) - 1, 0, -1):
            j = self.rand_range(0, i)
            values[i], values[j] = values[j], values[i]
        return values
