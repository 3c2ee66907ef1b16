# planet_generator/sampling.py

"""
================================================================================
SPHERE SAMPLING
================================================================================
Distributes points near-uniformly over a sphere with a golden-angle spiral
(Fibonacci lattice). The construction is deterministic and uses no random
numbers, so the same (N, R) always yields the same array.

Data Contract:
---------------
- Inputs: number of points N, sphere radius R (km).
- Outputs: a float32 array of shape (N, 3); every row lies at distance R
  from the origin. N <= 0 yields an empty (0, 3) array.
- Side Effects: None.
================================================================================
"""
import numpy as np

# Golden angle in radians: pi * (3 - sqrt(5)).
GOLDEN_ANGLE = np.pi * (3.0 - np.sqrt(5.0))


def fibonacci_unit_directions(num_points: int) -> np.ndarray:
    """
    Golden-angle spiral on the unit sphere, in float64.
    Point i sits at height y = 1 - 2(i + 0.5)/N and longitude i * GOLDEN_ANGLE.
    """
    if num_points <= 0:
        return np.zeros((0, 3), dtype=np.float64)

    # Indices stay float64 so the angle does not drift for very large N.
    i = np.arange(num_points, dtype=np.float64)
    t = (i + 0.5) / num_points
    y = 1.0 - 2.0 * t
    r = np.sqrt(np.maximum(0.0, 1.0 - y * y))
    theta = GOLDEN_ANGLE * i

    return np.column_stack((r * np.cos(theta), y, r * np.sin(theta)))


def generate_fibonacci_points(num_points: int, radius_km: float) -> np.ndarray:
    """Generates N points on a sphere of the given radius (float32 storage)."""
    directions = fibonacci_unit_directions(num_points)
    return (directions * float(radius_km)).astype(np.float32)
