# planet_generator/tectonics.py

"""
================================================================================
TECTONIC PLATE SEEDING
================================================================================
This module partitions the sampled sphere into tectonic plates. Plate seeds
are spread with the same golden-angle spiral used for sampling, and every
point joins the plate whose seed is angularly closest, which gives a discrete
(non-exact) spherical Voronoi diagram.

Data Contract:
---------------
- Inputs:
    - Number of plates.
    - The (N, 3) array of sample points.
- Outputs:
    - seeds (np.ndarray): (M, 3) unit directions, one per plate.
    - plate_ids (np.ndarray): int32 array, the plate of every point.
    - plate_to_points (list[np.ndarray]): ascending point indices per plate.
- Side Effects: None.
- Invariants: every point belongs to exactly one plate. When two seeds are
  equally close, the one with the lower index wins.
================================================================================
"""
import numpy as np

from . import config as DEFAULTS
from .sampling import fibonacci_unit_directions


def safe_normalize(vectors: np.ndarray) -> np.ndarray:
    """
    Normalizes vectors along the last axis. Vectors with a squared length
    below SMALL_NUMBER become zero instead of blowing up.
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    length_sq = np.sum(vectors * vectors, axis=-1, keepdims=True)
    valid = length_sq > DEFAULTS.SMALL_NUMBER
    safe_length = np.sqrt(np.where(valid, length_sq, 1.0))
    return np.where(valid, vectors / safe_length, 0.0)


def generate_plate_seeds(num_plates: int) -> np.ndarray:
    """Generates the seed directions for tectonic plates deterministically."""
    if num_plates <= 0:
        return np.zeros((0, 3), dtype=np.float64)
    # Renormalize to guard against precision loss in the spiral.
    return safe_normalize(fibonacci_unit_directions(num_plates))


def assign_points_to_seeds(
    points: np.ndarray,
    seeds: np.ndarray,
    block_size: int = DEFAULTS.ASSIGNMENT_BLOCK_SIZE
) -> tuple[np.ndarray, list[np.ndarray]]:
    """
    Assigns every point to the seed maximizing the dot product with its
    normalized position, which is the same as minimizing the great-circle
    distance. Points are scored in blocks to bound the size of the (block, M)
    score matrix.
    """
    num_points = len(points)
    num_seeds = len(seeds)
    plate_ids = np.zeros(num_points, dtype=np.int32)

    if num_seeds == 0:
        return plate_ids, []

    seeds_t = np.asarray(seeds, dtype=np.float64).T
    for start in range(0, num_points, block_size):
        stop = min(start + block_size, num_points)
        block = safe_normalize(points[start:stop])
        # argmax returns the first maximum, which fixes the tie-break.
        plate_ids[start:stop] = np.argmax(block @ seeds_t, axis=1)

    return plate_ids, split_points_by_plate(plate_ids, num_seeds)


def split_points_by_plate(plate_ids: np.ndarray, num_plates: int) -> list[np.ndarray]:
    """Inverts a point -> plate map into ascending index arrays per plate."""
    order = np.argsort(plate_ids, kind='stable')
    counts = np.bincount(plate_ids, minlength=num_plates)
    return np.split(order, np.cumsum(counts)[:-1])


def compute_plate_centroids(
    points: np.ndarray,
    plate_to_points: list[np.ndarray],
    seeds: np.ndarray
) -> np.ndarray:
    """
    Normalized mean position of each plate's members. An empty plate (or one
    whose members cancel out) falls back to its seed direction.
    """
    centroids = np.array(seeds, dtype=np.float64, copy=True)
    for plate_idx, members in enumerate(plate_to_points):
        if len(members) == 0:
            continue
        mean = np.asarray(points[members], dtype=np.float64).mean(axis=0)
        direction = safe_normalize(mean)
        if np.any(direction):
            centroids[plate_idx] = direction
    return centroids
