# planet_generator/adjacency.py

"""
================================================================================
ADJACENCY PROVIDERS
================================================================================
Triangulates a point cloud lying on a sphere and derives the neighbor lists
used for boundary detection. The rest of the package only depends on the
AdjacencyProvider protocol; the backend is picked by name from the settings.

For points on a sphere, the convex hull is the spherical Delaunay
triangulation, so the hull facets are the triangles of the surface mesh.

Data Contract:
---------------
- Inputs: the (N, 3) array of sample points.
- Outputs: an AdjacencyBuildResult holding either an Adjacency (symmetric,
  self-free, ascending neighbor lists plus (T, 3) triangles) or an error.
- Side Effects: None. A failed build leaves no partial adjacency behind.
- Failures: fewer than 4 points, non-finite coordinates, degenerate input
  rejected by Qhull, or no backend available.
================================================================================
"""
from typing import Protocol

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from . import config as DEFAULTS
from .errors import PlanetConfigError
from .models import Adjacency, AdjacencyBuildResult


class AdjacencyProvider(Protocol):
    """
    A protocol for anything able to triangulate the sample points.
    build() must not raise for ordinary failures; it returns an error instead.
    """
    name: str

    def build(self, points: np.ndarray) -> AdjacencyBuildResult: ...


def neighbors_from_triangles(triangles: np.ndarray, num_points: int) -> Adjacency:
    """
    Builds symmetric CSR neighbor lists from the edges of a triangle list.
    Duplicate edges and self references are dropped; lists are ascending.
    """
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)

    a, b, c = triangles[:, 0], triangles[:, 1], triangles[:, 2]
    sources = np.concatenate((a, b, b, c, c, a))
    targets = np.concatenate((b, a, c, b, a, c))

    keep = sources != targets
    indptr = np.zeros(num_points + 1, dtype=np.int64)
    if not np.any(keep):
        return Adjacency(indptr=indptr, indices=np.zeros(0, dtype=np.int64), triangles=triangles)

    # np.unique sorts rows lexicographically, which groups them by source.
    edges = np.unique(np.column_stack((sources[keep], targets[keep])), axis=0)
    np.cumsum(np.bincount(edges[:, 0], minlength=num_points), out=indptr[1:])

    return Adjacency(indptr=indptr, indices=edges[:, 1].astype(np.int64), triangles=triangles)


class ConvexHullAdjacencyProvider:
    """Triangulates points on a sphere with Qhull's convex hull."""

    name = 'qhull'

    def build(self, points: np.ndarray) -> AdjacencyBuildResult:
        points = np.asarray(points, dtype=np.float64)
        num_points = len(points)

        if num_points < DEFAULTS.MIN_TRIANGULATION_POINTS:
            return AdjacencyBuildResult(
                error=f"Insufficient points for triangulation: {num_points} "
                      f"(need at least {DEFAULTS.MIN_TRIANGULATION_POINTS})"
            )
        if points.ndim != 2 or points.shape[1] != 3:
            return AdjacencyBuildResult(error=f"Expected an (N, 3) point array, got shape {points.shape}")
        if not np.all(np.isfinite(points)):
            return AdjacencyBuildResult(error="Point array contains non-finite coordinates")

        try:
            hull = ConvexHull(points)
        except QhullError as e:
            return AdjacencyBuildResult(error=f"Convex hull triangulation failed: {e}")

        triangles = np.asarray(hull.simplices, dtype=np.int64)
        if len(triangles) == 0:
            return AdjacencyBuildResult(error="Convex hull triangulation produced no triangles")

        return AdjacencyBuildResult(adjacency=neighbors_from_triangles(triangles, num_points))


class UnavailableAdjacencyProvider:
    """Stand-in used when no triangulation backend is configured. Always fails."""

    name = 'none'

    def build(self, points: np.ndarray) -> AdjacencyBuildResult:
        return AdjacencyBuildResult(
            error="Triangulation backend not available (adjacency_backend='none')."
        )


def create_adjacency_provider(backend: str = DEFAULTS.DEFAULT_ADJACENCY_BACKEND) -> AdjacencyProvider:
    """Returns the provider registered under `backend`."""
    if backend == 'qhull':
        return ConvexHullAdjacencyProvider()
    if backend == 'none':
        return UnavailableAdjacencyProvider()
    raise PlanetConfigError(
        f"Unknown adjacency backend '{backend}'. Expected one of {DEFAULTS.ADJACENCY_BACKENDS}."
    )
