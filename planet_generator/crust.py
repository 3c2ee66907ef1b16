# planet_generator/crust.py

"""
================================================================================
CRUST & PLATE DYNAMICS INITIALIZATION
================================================================================
Synthesizes the initial crust of every sample point and the rigid motion of
every plate.

Plates are first classified as oceanic or continental at the plate level.
Continental plates receive thick, old crust slightly above sea level. Oceanic
plates are modelled as if a spreading ridge sat at the plate centroid: the
seafloor deepens and ages linearly with the angular distance from it.

Each plate is one task. A task draws only from its own random stream, seeded
from (seed, plate index), and writes only the entries of the points it owns,
so the result does not depend on scheduling or on the parallel flag.

Data Contract:
---------------
- Inputs:
    - Sample points (N, 3), the plate -> points partition, plate centroids.
    - Continental ratio, elevation reference levels (km), seed.
    - Planet radius (km) and maximum plate speed (mm/year) for dynamics.
- Outputs:
    - CrustData with N samples.
    - Rotation axes (M, 3) and angular velocities (M,) in rad/My.
- Side Effects: Logs stage timings.
- Invariants:
    - Oceanic thickness is 7 km and age lies in [0, 200] My.
    - Continental thickness is 35 km and orogeny age lies in [500, 3000] My.
    - |cross(axis * w, p)| <= max plate speed for every |p| = R.
================================================================================
"""
import logging
import math
import time
from typing import Optional

import numpy as np

from . import config as DEFAULTS
from .models import CrustData, CrustType, OrogenyType
from .parallel import parallel_map
from .random_stream import PlanetRandom, derive_seed
from .tectonics import safe_normalize

_module_logger = logging.getLogger(__name__)


def count_continental_plates(num_plates: int, continental_ratio: float) -> int:
    """Number of continental plates, rounding halves away from zero."""
    return int(math.floor(num_plates * continental_ratio + 0.5))


def classify_plates(num_plates: int, continental_ratio: float, seed: int) -> np.ndarray:
    """
    Marks round(M * ratio) randomly chosen plates as continental.

    The ratio applies to plates, not to points. Plate sizes vary, so the
    fraction of continental *points* only approximates the ratio.

    Returns:
        np.ndarray: bool array, True where the plate is continental.
    """
    num_continental = count_continental_plates(num_plates, continental_ratio)

    rng = PlanetRandom(seed)
    plate_indices = rng.shuffle(list(range(num_plates)))

    is_continental = np.zeros(num_plates, dtype=bool)
    is_continental[plate_indices[:num_continental]] = True
    return is_continental


def compute_geodesic_distance_to_center(point, plate_centroid, planet_radius_km: float) -> float:
    """Great-circle distance (km) between a point and a plate centroid direction."""
    p_hat = safe_normalize(point)
    c_hat = safe_normalize(plate_centroid)
    cos_angle = float(np.clip(np.dot(p_hat, c_hat), -1.0, 1.0))
    return planet_radius_km * math.acos(cos_angle)


def _fill_continental(crust: CrustData, members: np.ndarray, rng: PlanetRandom):
    count = len(members)
    jitter = DEFAULTS.CONTINENTAL_ELEVATION_JITTER_KM

    crust.crust_type[members] = CrustType.CONTINENTAL
    crust.thickness[members] = DEFAULTS.CONTINENTAL_CRUST_THICKNESS_KM
    crust.elevation[members] = DEFAULTS.CONTINENTAL_BASE_ELEVATION_KM + rng.frand_range(-jitter, jitter, count)
    crust.orogeny_age[members] = rng.frand_range(
        DEFAULTS.CONTINENTAL_MIN_OROGENY_AGE_MY, DEFAULTS.CONTINENTAL_MAX_OROGENY_AGE_MY, count
    )
    # Orogeny type and fold direction are set by collisions later on.
    crust.orogeny_type[members] = OrogenyType.NONE
    crust.fold_direction[members] = 0.0

    crust.oceanic_age[members] = 0.0
    crust.ridge_direction[members] = 0.0


def _fill_oceanic(
    crust: CrustData,
    members: np.ndarray,
    member_points: np.ndarray,
    centroid: np.ndarray,
    abyssal_plain_elevation_km: float,
    highest_oceanic_ridge_elevation_km: float
):
    p_hat = safe_normalize(member_points)

    # 1. Angular distance to the ridge, normalized by the assumed plate extent.
    cos_angle = np.clip(p_hat @ centroid, -1.0, 1.0)
    distance_angle = np.arccos(cos_angle)
    normalized_dist = np.clip(distance_angle / DEFAULTS.MAX_PLATE_ANGULAR_EXTENT_RAD, 0.0, 1.0)

    # 2. Ridge at the centroid, abyssal plain at the assumed plate edge.
    elevation = highest_oceanic_ridge_elevation_km + (
        abyssal_plain_elevation_km - highest_oceanic_ridge_elevation_km
    ) * normalized_dist

    # 3. Ridge direction: tangent to the sphere, perpendicular to the
    #    direction towards the centroid.
    to_center = safe_normalize(centroid - p_hat)
    ridge_direction = safe_normalize(np.cross(to_center, member_points))

    crust.crust_type[members] = CrustType.OCEANIC
    crust.thickness[members] = DEFAULTS.OCEANIC_CRUST_THICKNESS_KM
    crust.elevation[members] = elevation
    crust.oceanic_age[members] = normalized_dist * DEFAULTS.MAX_OCEANIC_AGE_MY
    crust.ridge_direction[members] = ridge_direction

    crust.orogeny_age[members] = 0.0
    crust.orogeny_type[members] = OrogenyType.NONE
    crust.fold_direction[members] = 0.0


def initialize_crust_data(
    sample_points: np.ndarray,
    plate_to_points: list[np.ndarray],
    is_plate_continental: np.ndarray,
    abyssal_plain_elevation_km: float,
    highest_oceanic_ridge_elevation_km: float,
    seed: int,
    parallel: bool = True,
    plate_centroids: Optional[np.ndarray] = None,
    logger: Optional[logging.Logger] = None,
    seed_offset: int = DEFAULTS.CRUST_SEED_OFFSET,
    seed_stride: int = DEFAULTS.PLATE_SEED_STRIDE
) -> CrustData:
    """
    Builds the crust of every sample point, one task per plate.

    Args:
        sample_points (np.ndarray): (N, 3) positions on the sphere.
        plate_to_points (list[np.ndarray]): member indices of every plate.
        is_plate_continental (np.ndarray): plate classification.
        abyssal_plain_elevation_km (float): oceanic elevation at the plate edge.
        highest_oceanic_ridge_elevation_km (float): oceanic elevation at the ridge.
        seed (int): master seed; plate streams are derived from it.
        parallel (bool): run plate tasks on the thread pool.
        plate_centroids (np.ndarray, optional): unit centroid per plate. If
            None, each task computes the normalized mean of its members.
        logger (logging.Logger, optional): receives the stage timing.
        seed_offset, seed_stride (int): plate i draws from seed + offset + i * stride.
    """
    logger = logger or _module_logger
    num_plates = len(plate_to_points)
    crust = CrustData.allocate(len(sample_points))

    def work_per_plate(plate_idx: int):
        members = plate_to_points[plate_idx]
        if len(members) == 0:
            return

        # Deterministic per-plate stream, independent of processing order.
        rng = PlanetRandom(derive_seed(seed, seed_offset, plate_idx, seed_stride))

        if is_plate_continental[plate_idx]:
            _fill_continental(crust, members, rng)
            return

        member_points = np.asarray(sample_points[members], dtype=np.float64)
        if plate_centroids is not None:
            centroid = np.asarray(plate_centroids[plate_idx], dtype=np.float64)
        else:
            centroid = safe_normalize(member_points.mean(axis=0))
        _fill_oceanic(
            crust, members, member_points, centroid,
            abyssal_plain_elevation_km, highest_oceanic_ridge_elevation_km
        )

    start_time = time.perf_counter()
    parallel_map(work_per_plate, range(num_plates), parallel=parallel)
    elapsed_ms = (time.perf_counter() - start_time) * 1000.0
    mode = "parallelized" if parallel else "sequential"
    logger.info(f"Crust init: {num_plates} plates {mode} in {elapsed_ms:.2f}ms")

    return crust


def max_angular_velocity(planet_radius_km: float, max_plate_speed_mm_per_year: float) -> float:
    """
    Angular velocity bound (rad/My) for a maximum surface speed.
    1 mm/year is 1 km/My (1e-6 km per 1e-6 My), so no unit factor is needed.
    """
    max_speed_km_per_my = max_plate_speed_mm_per_year
    return max_speed_km_per_my / planet_radius_km


def _random_rotation(rng: PlanetRandom, max_omega: float) -> tuple[np.ndarray, float]:
    axis = rng.random_axis(DEFAULTS.MIN_AXIS_LENGTH_SQUARED)
    omega = float(rng.frand_range(-max_omega, max_omega))
    return axis, omega


def initialize_plate_dynamics(
    num_plates: int,
    planet_radius_km: float,
    max_plate_speed_mm_per_year: float,
    seed: int,
    parallel: bool = True,
    logger: Optional[logging.Logger] = None,
    seed_stride: int = DEFAULTS.PLATE_SEED_STRIDE
) -> tuple[np.ndarray, np.ndarray]:
    """
    Draws a random Euler pole and angular velocity for every plate.

    For a point p on the sphere, |cross(axis * w, p)| <= |w| * R, and
    |w| <= v_max / R, so no point ever moves faster than v_max.

    Returns:
        tuple: (rotation axes (M, 3), angular velocities (M,) in rad/My)
    """
    logger = logger or _module_logger
    max_omega = max_angular_velocity(planet_radius_km, max_plate_speed_mm_per_year)

    def work_per_plate(plate_idx: int):
        rng = PlanetRandom(derive_seed(seed, 0, plate_idx, seed_stride))
        return _random_rotation(rng, max_omega)

    start_time = time.perf_counter()
    results = parallel_map(work_per_plate, range(num_plates), parallel=parallel)
    elapsed_ms = (time.perf_counter() - start_time) * 1000.0
    logger.debug(f"Plate dynamics: {num_plates} plates, max angular velocity {max_omega:.6f} rad/My ({elapsed_ms:.2f}ms)")

    axes = np.zeros((num_plates, 3), dtype=np.float64)
    omegas = np.zeros(num_plates, dtype=np.float64)
    for plate_idx, (axis, omega) in enumerate(results):
        axes[plate_idx] = axis
        omegas[plate_idx] = omega
    return axes, omegas
