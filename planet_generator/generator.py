# planet_generator/generator.py

"""
================================================================================
CORE PLANET GENERATOR
================================================================================
This module contains the PlanetGenerator class, responsible for building the
initial state of a tectonic planet: sample points, plates, crust, plate
motion and plate boundaries.

The pipeline runs strictly downstream:
    sampling -> plate seeding -> crust & dynamics -> (adjacency) -> boundaries

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of generation parameters which can override
      the internal defaults. Expected keys include 'seed', 'num_plates', etc.
    - logger: A configured Python logging object for runtime messages.
    - adjacency_provider (optional): Anything implementing AdjacencyProvider.
      If None, one is created from the 'adjacency_backend' setting.
- Outputs (from methods):
    - PlanetState holding NumPy arrays for points, plate ids, crust fields and
      boundary flags, plus the list of Plate objects.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same settings, the output is deterministic and does
  not depend on the 'parallel' flag. A rebuild with unchanged settings
  returns the existing state without recomputing it.
================================================================================
"""
import hashlib
import json
import logging
import time
from typing import Optional

import numpy as np

from . import config as DEFAULTS
from . import crust
from . import sampling
from . import tectonics
from .adjacency import AdjacencyProvider, create_adjacency_provider
from .boundaries import detect_plate_boundaries
from .errors import PlanetConfigError
from .models import Adjacency, AdjacencyBuildResult, CrustType, PlanetState, Plate

# Settings that only change how the planet is computed, not what is computed.
EXECUTION_ONLY_SETTINGS = ('parallel', 'adjacency_backend')

_DEFAULT_SETTINGS = {
    'seed': DEFAULTS.DEFAULT_SEED,
    'plate_classification_seed_offset': DEFAULTS.PLATE_CLASSIFICATION_SEED_OFFSET,
    'crust_seed_offset': DEFAULTS.CRUST_SEED_OFFSET,
    'plate_dynamics_seed_offset': DEFAULTS.PLATE_DYNAMICS_SEED_OFFSET,
    'plate_seed_stride': DEFAULTS.PLATE_SEED_STRIDE,

    'num_sample_points': DEFAULTS.DEFAULT_NUM_SAMPLE_POINTS,
    'planet_radius_km': DEFAULTS.DEFAULT_PLANET_RADIUS_KM,
    'num_plates': DEFAULTS.DEFAULT_NUM_PLATES,
    'continental_ratio': DEFAULTS.DEFAULT_CONTINENTAL_RATIO,

    'abyssal_plain_elevation_km': DEFAULTS.DEFAULT_ABYSSAL_PLAIN_ELEVATION_KM,
    'highest_oceanic_ridge_elevation_km': DEFAULTS.DEFAULT_HIGHEST_OCEANIC_RIDGE_ELEVATION_KM,
    'max_plate_speed_mm_per_year': DEFAULTS.DEFAULT_MAX_PLATE_SPEED_MM_PER_YEAR,

    'parallel': DEFAULTS.DEFAULT_PARALLEL,
    'adjacency_backend': DEFAULTS.DEFAULT_ADJACENCY_BACKEND,
}

_INT_SETTINGS = (
    'seed', 'plate_classification_seed_offset', 'crust_seed_offset',
    'plate_dynamics_seed_offset', 'plate_seed_stride', 'num_sample_points', 'num_plates',
)
_FLOAT_SETTINGS = (
    'planet_radius_km', 'continental_ratio', 'abyssal_plain_elevation_km',
    'highest_oceanic_ridge_elevation_km', 'max_plate_speed_mm_per_year',
)


def resolve_settings(config: Optional[dict], logger: Optional[logging.Logger] = None) -> dict:
    """
    Consolidates user configuration with the internal defaults and validates
    the result. Unknown keys are ignored.

    Raises:
        PlanetConfigError: if a value has the wrong type or is out of range.
    """
    logger = logger or logging.getLogger(__name__)
    user_config = config or {}

    unknown = sorted(set(user_config) - set(_DEFAULT_SETTINGS))
    if unknown:
        logger.debug(f"Ignoring unknown planet settings: {unknown}")

    settings = {key: user_config.get(key, default) for key, default in _DEFAULT_SETTINGS.items()}

    for key in _INT_SETTINGS:
        value = settings[key]
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise PlanetConfigError(f"'{key}' must be an integer, got {value!r}")
        settings[key] = int(value)
    for key in _FLOAT_SETTINGS:
        value = settings[key]
        if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
            raise PlanetConfigError(f"'{key}' must be a number, got {value!r}")
        settings[key] = float(value)
    if not isinstance(settings['parallel'], (bool, np.bool_)):
        raise PlanetConfigError(f"'parallel' must be true or false, got {settings['parallel']!r}")
    settings['parallel'] = bool(settings['parallel'])

    if settings['num_sample_points'] < 1:
        raise PlanetConfigError(f"'num_sample_points' must be at least 1, got {settings['num_sample_points']}")
    if settings['num_plates'] < 1:
        raise PlanetConfigError(f"'num_plates' must be at least 1, got {settings['num_plates']}")
    if not settings['planet_radius_km'] > 0.0:
        raise PlanetConfigError(f"'planet_radius_km' must be positive, got {settings['planet_radius_km']}")
    if not 0.0 <= settings['continental_ratio'] <= 1.0:
        raise PlanetConfigError(f"'continental_ratio' must lie in [0, 1], got {settings['continental_ratio']}")
    if not settings['max_plate_speed_mm_per_year'] >= 0.0:
        raise PlanetConfigError(
            f"'max_plate_speed_mm_per_year' must not be negative, got {settings['max_plate_speed_mm_per_year']}"
        )
    if settings['adjacency_backend'] not in DEFAULTS.ADJACENCY_BACKENDS:
        raise PlanetConfigError(
            f"Unknown adjacency backend '{settings['adjacency_backend']}'. "
            f"Expected one of {DEFAULTS.ADJACENCY_BACKENDS}."
        )

    return settings


def compute_settings_hash(settings: dict) -> str:
    """
    Memoization key of a settings snapshot: a SHA-256 over every setting that
    changes the generated output.
    """
    relevant = {k: v for k, v in settings.items() if k not in EXECUTION_ONLY_SETTINGS}
    payload = json.dumps(relevant, sort_keys=True)
    return hashlib.sha256(payload.encode('utf-8')).hexdigest()


def build_planet_state(settings: dict, logger: Optional[logging.Logger] = None) -> PlanetState:
    """
    Runs sampling, seeding, crust synthesis and plate dynamics for a resolved
    settings dict. Adjacency and boundary flags are left empty; they depend
    on an external triangulation.
    """
    logger = logger or logging.getLogger(__name__)
    parallel = settings['parallel']
    seed = settings['seed']
    start_time = time.perf_counter()

    # 1. Sample the sphere.
    points = sampling.generate_fibonacci_points(settings['num_sample_points'], settings['planet_radius_km'])
    logger.debug(f"Sampling: {len(points)} points on a {settings['planet_radius_km']:.1f} km sphere")

    # 2. Seed plates and partition the points.
    seeds = tectonics.generate_plate_seeds(settings['num_plates'])
    plate_ids, plate_to_points = tectonics.assign_points_to_seeds(points, seeds)
    centroids = tectonics.compute_plate_centroids(points, plate_to_points, seeds)
    logger.debug(f"Seeding: {len(points)} points assigned to {len(seeds)} plates")

    # 3. Classify plates and synthesize the crust.
    is_continental = crust.classify_plates(
        settings['num_plates'],
        settings['continental_ratio'],
        seed + settings['plate_classification_seed_offset']
    )
    crust_data = crust.initialize_crust_data(
        points,
        plate_to_points,
        is_continental,
        settings['abyssal_plain_elevation_km'],
        settings['highest_oceanic_ridge_elevation_km'],
        seed,
        parallel=parallel,
        plate_centroids=centroids,
        logger=logger,
        seed_offset=settings['crust_seed_offset'],
        seed_stride=settings['plate_seed_stride']
    )

    # 4. Give every plate a rigid rotation.
    axes, angular_velocities = crust.initialize_plate_dynamics(
        settings['num_plates'],
        settings['planet_radius_km'],
        settings['max_plate_speed_mm_per_year'],
        seed + settings['plate_dynamics_seed_offset'],
        parallel=parallel,
        logger=logger,
        seed_stride=settings['plate_seed_stride']
    )

    plates = [
        Plate(
            plate_id=plate_idx,
            point_indices=plate_to_points[plate_idx],
            seed_direction=seeds[plate_idx],
            centroid_direction=centroids[plate_idx],
            crust_type=CrustType.CONTINENTAL if is_continental[plate_idx] else CrustType.OCEANIC,
            rotation_axis=axes[plate_idx],
            angular_velocity=float(angular_velocities[plate_idx]),
        )
        for plate_idx in range(settings['num_plates'])
    ]

    elapsed_ms = (time.perf_counter() - start_time) * 1000.0
    logger.info(
        f"Planet built: {len(points)} points, {len(plates)} plates "
        f"({int(np.count_nonzero(is_continental))} continental) in {elapsed_ms:.2f}ms"
    )

    return PlanetState(
        points=points,
        seeds=seeds,
        plate_ids=plate_ids,
        plates=plates,
        crust=crust_data,
        settings=dict(settings),
        settings_hash=compute_settings_hash(settings),
    )


def rebuild(
    config: Optional[dict],
    logger: Optional[logging.Logger] = None,
    previous: Optional[PlanetState] = None
) -> PlanetState:
    """
    Returns a PlanetState for `config`. If `previous` was built from the same
    generation settings and is not empty, it is returned unchanged.
    """
    logger = logger or logging.getLogger(__name__)
    settings = resolve_settings(config, logger)
    settings_hash = compute_settings_hash(settings)

    if previous is not None and previous.settings_hash == settings_hash and not previous.is_empty:
        logger.debug("Settings unchanged, skipping rebuild.")
        return previous

    return build_planet_state(settings, logger)


class PlanetGenerator:
    """
    Builds and owns the state of a procedurally generated tectonic planet.
    This class is backend-only and does not handle any visualization.
    """
    def __init__(
        self,
        config: dict,
        logger: logging.Logger,
        adjacency_provider: Optional[AdjacencyProvider] = None
    ):
        """
        Initializes the planet generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
            adjacency_provider (AdjacencyProvider, optional): Triangulation
                backend. If None, one is created from 'adjacency_backend'.
        """
        self.logger = logger
        self.user_config = dict(config or {})
        self.logger.info("PlanetGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = resolve_settings(self.user_config, self.logger)
        self.settings_hash = compute_settings_hash(self.settings)

        if adjacency_provider is not None:
            self.adjacency_provider = adjacency_provider
        else:
            self.adjacency_provider = create_adjacency_provider(self.settings['adjacency_backend'])

        self.state: Optional[PlanetState] = None
        self.last_adjacency_error: Optional[str] = None

        self.logger.info(f"PlanetGenerator initialized with seed: {self.settings['seed']}")
        self.logger.info(
            f"Planet: radius {self.settings['planet_radius_km']:.1f} km, "
            f"{self.settings['num_sample_points']} sample points, "
            f"{self.settings['num_plates']} plates "
            f"(continental ratio {self.settings['continental_ratio']:.2f}), "
            f"{'parallel' if self.settings['parallel'] else 'sequential'} execution"
        )

    @property
    def seed(self) -> int:
        return self.settings['seed']

    def update_config(self, overrides: dict) -> bool:
        """
        Merges new values into the user configuration.

        Returns:
            bool: True if the generation settings changed, i.e. the next
            rebuild() will recompute the planet.
        """
        new_user_config = {**self.user_config, **overrides}
        new_settings = resolve_settings(new_user_config, self.logger)

        if new_settings['adjacency_backend'] != self.settings['adjacency_backend']:
            self.adjacency_provider = create_adjacency_provider(new_settings['adjacency_backend'])

        self.user_config = new_user_config
        self.settings = new_settings
        new_hash = compute_settings_hash(new_settings)
        changed = new_hash != self.settings_hash
        self.settings_hash = new_hash
        return changed

    def rebuild(self, force: bool = False, with_adjacency: bool = True) -> PlanetState:
        """
        Regenerates the planet if the settings changed since the last build
        (or if `force` is set). When new geometry is produced, adjacency is
        rebuilt and boundaries are detected, unless `with_adjacency` is False.
        """
        previous = None if force else self.state
        state = rebuild(self.settings, self.logger, previous=previous)
        if state is previous:
            # A lazily built state may still lack its adjacency.
            if with_adjacency and state.adjacency is None:
                self.build_adjacency()
            return state

        self.state = state
        if with_adjacency:
            self.build_adjacency()
        return state

    def build_adjacency(self) -> AdjacencyBuildResult:
        """
        Triangulates the current points with the configured provider. On
        failure the error is logged and any previous boundary flags are kept.
        """
        state = self._require_state()
        start_time = time.perf_counter()
        result = self.adjacency_provider.build(state.points)
        elapsed_ms = (time.perf_counter() - start_time) * 1000.0

        if not result.ok:
            self.last_adjacency_error = result.error
            self.logger.warning(f"Adjacency build failed ({self.adjacency_provider.name}): {result.error}")
            return result

        self.last_adjacency_error = None
        self.logger.info(
            f"Adjacency: {result.adjacency.num_triangles} triangles for "
            f"{state.num_points} points in {elapsed_ms:.2f}ms"
        )
        self.set_adjacency(result.adjacency)
        return result

    def set_adjacency(self, adjacency: Adjacency):
        """Supplies adjacency computed elsewhere and refreshes the boundary flags."""
        state = self._require_state()
        state.adjacency = adjacency
        self.detect_boundaries()

    def detect_boundaries(self) -> Optional[np.ndarray]:
        """Recomputes the boundary flags from the current adjacency."""
        state = self._require_state()
        if state.adjacency is None:
            self.logger.warning("No adjacency available, boundary detection skipped.")
            return state.boundary_flags

        state.boundary_flags = detect_plate_boundaries(
            state.plate_ids,
            state.adjacency,
            parallel=self.settings['parallel'],
            logger=self.logger
        )
        self.logger.debug(f"Boundary points: {state.num_boundary_points()} of {state.num_points}")
        return state.boundary_flags

    def _require_state(self) -> PlanetState:
        if self.state is None:
            self.rebuild(with_adjacency=False)
        return self.state
