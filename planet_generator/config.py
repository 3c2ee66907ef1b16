# planet_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the planet
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC PLANET.
Instead, pass a configuration dictionary to the PlanetGenerator instance.

Units:
  - Distances and elevations in kilometers (km)
  - Ages in million years (My)
  - Plate speeds in mm/year (numerically identical to km/My)
================================================================================
"""
import math

# --- Determinism ---
DEFAULT_SEED = 1337
# Offsets used to derive independent streams from the master seed. Every
# plate-level stream is `seed + offset + plate_index * PLATE_SEED_STRIDE`, so
# its values do not depend on the order in which plates are processed.
PLATE_CLASSIFICATION_SEED_OFFSET = 0
CRUST_SEED_OFFSET = 1000
PLATE_DYNAMICS_SEED_OFFSET = 100
# A prime stride keeps per-plate seeds from overlapping between streams.
PLATE_SEED_STRIDE = 10007

# --- Planet & Sampling ---
DEFAULT_PLANET_RADIUS_KM = 6370.0
DEFAULT_NUM_SAMPLE_POINTS = 500000

# --- Plates ---
DEFAULT_NUM_PLATES = 40
# Fraction of *plates* (not points) marked continental.
DEFAULT_CONTINENTAL_RATIO = 0.3

# --- Elevation reference levels (km, relative to sea level) ---
DEFAULT_HIGHEST_OCEANIC_RIDGE_ELEVATION_KM = -1.0
DEFAULT_ABYSSAL_PLAIN_ELEVATION_KM = -6.0

# --- Plate motion ---
DEFAULT_MAX_PLATE_SPEED_MM_PER_YEAR = 100.0
# Random rotation axes shorter than this (squared length) are redrawn.
MIN_AXIS_LENGTH_SQUARED = 0.01

# --- Crust synthesis ---
OCEANIC_CRUST_THICKNESS_KM = 7.0
CONTINENTAL_CRUST_THICKNESS_KM = 35.0

CONTINENTAL_BASE_ELEVATION_KM = 0.5
CONTINENTAL_ELEVATION_JITTER_KM = 0.2
CONTINENTAL_MIN_OROGENY_AGE_MY = 500.0
CONTINENTAL_MAX_OROGENY_AGE_MY = 3000.0

# Oceanic crust ages linearly away from the ridge (the plate centroid).
MAX_OCEANIC_AGE_MY = 200.0
# Assumed angular extent of a plate, used to normalize the ridge distance.
# A fixed value, independent of the real size of each plate.
MAX_PLATE_ANGULAR_EXTENT_RAD = math.pi / 4.0

# Vectors with a squared length below this are treated as zero.
SMALL_NUMBER = 1e-8

# --- Execution ---
DEFAULT_PARALLEL = True
# Points handled by one boundary-detection task in parallel mode.
BOUNDARY_CHUNK_SIZE = 65536
# Points scored against all seeds at once during plate assignment.
ASSIGNMENT_BLOCK_SIZE = 65536

# --- Adjacency ---
# 'qhull': convex hull triangulation (scipy.spatial)
# 'none':  no triangulation available, every build fails explicitly
DEFAULT_ADJACENCY_BACKEND = 'qhull'
ADJACENCY_BACKENDS = ('qhull', 'none')
MIN_TRIANGULATION_POINTS = 4
