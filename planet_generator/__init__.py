# planet_generator/__init__.py

# This file makes the 'planet_generator' directory a Python package.
# It also defines the public API of the package.

from .adjacency import (
    AdjacencyProvider,
    ConvexHullAdjacencyProvider,
    UnavailableAdjacencyProvider,
    create_adjacency_provider,
    neighbors_from_triangles,
)
from .boundaries import detect_plate_boundaries
from .errors import PlanetConfigError
from .generator import PlanetGenerator, build_planet_state, compute_settings_hash, rebuild, resolve_settings
from .models import (
    Adjacency,
    AdjacencyBuildResult,
    CrustData,
    CrustSample,
    CrustType,
    OrogenyType,
    PlanetState,
    Plate,
)

__all__ = [
    "PlanetGenerator", "build_planet_state", "rebuild", "resolve_settings", "compute_settings_hash",
    "PlanetConfigError", "detect_plate_boundaries",
    "AdjacencyProvider", "ConvexHullAdjacencyProvider", "UnavailableAdjacencyProvider",
    "create_adjacency_provider", "neighbors_from_triangles",
    "Adjacency", "AdjacencyBuildResult", "CrustData", "CrustSample", "CrustType", "OrogenyType",
    "PlanetState", "Plate",
]
