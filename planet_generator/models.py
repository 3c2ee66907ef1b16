# planet_generator/models.py

"""
================================================================================
PLANET DATA MODEL
================================================================================
Containers for everything the generator produces. Per-point data is kept as
NumPy arrays (one array per field) so that a planet with hundreds of
thousands of samples stays cheap to build, hash and save.

Data Contract:
---------------
- SamplePoint:  one row of PlanetState.points, shape (N, 3), float32, |p| = R.
- Plate:        one rigid plate with its members and Euler-pole motion.
- CrustData:    per-point crust fields, every array has length N.
- Adjacency:    symmetric neighbor lists (CSR) plus triangle indices.
- PlanetState:  the atomic output of one rebuild.
================================================================================
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional

import numpy as np

from . import config as DEFAULTS


class CrustType(IntEnum):
    """Crust category of a sample point."""
    OCEANIC = 0
    CONTINENTAL = 1


class OrogenyType(IntEnum):
    """Mountain-building history of continental crust."""
    NONE = 0
    ANDEAN = 1      # subduction orogeny
    HIMALAYAN = 2   # continental collision


@dataclass
class Plate:
    """A rigid plate rotating about an axis through the planet's center."""
    plate_id: int
    point_indices: np.ndarray
    seed_direction: np.ndarray
    centroid_direction: np.ndarray
    crust_type: CrustType = CrustType.OCEANIC
    rotation_axis: np.ndarray = field(default_factory=lambda: np.array([0.0, 1.0, 0.0]))
    angular_velocity: float = 0.0  # rad/My

    @property
    def num_points(self) -> int:
        return int(len(self.point_indices))

    @property
    def is_continental(self) -> bool:
        return self.crust_type == CrustType.CONTINENTAL

    def angular_velocity_vector(self) -> np.ndarray:
        return self.rotation_axis * self.angular_velocity

    def velocity_at(self, points: np.ndarray) -> np.ndarray:
        """
        Surface velocity (km/My) at one point (3,) or many points (K, 3).
        """
        return np.cross(self.angular_velocity_vector(), np.asarray(points, dtype=np.float64))

    def to_dict(self) -> dict[str, Any]:
        return {
            "plate_id": self.plate_id,
            "num_points": self.num_points,
            "crust_type": self.crust_type.name.lower(),
            "seed_direction": [float(v) for v in self.seed_direction],
            "centroid_direction": [float(v) for v in self.centroid_direction],
            "rotation_axis": [float(v) for v in self.rotation_axis],
            "angular_velocity": float(self.angular_velocity),
        }


@dataclass(frozen=True)
class CrustSample:
    """Crust record of a single sample point."""
    crust_type: CrustType
    thickness: float           # km
    elevation: float           # km relative to sea level
    oceanic_age: float         # My, oceanic only
    ridge_direction: tuple     # unit vector, oceanic only
    orogeny_age: float         # My, continental only
    orogeny_type: OrogenyType  # continental only
    fold_direction: tuple      # unit vector, continental only


@dataclass
class CrustData:
    """Structure-of-arrays storage for all crust samples of a planet."""
    crust_type: np.ndarray
    thickness: np.ndarray
    elevation: np.ndarray
    oceanic_age: np.ndarray
    ridge_direction: np.ndarray
    orogeny_age: np.ndarray
    orogeny_type: np.ndarray
    fold_direction: np.ndarray

    @classmethod
    def allocate(cls, num_points: int) -> CrustData:
        """Arrays filled with the neutral oceanic defaults."""
        return cls(
            crust_type=np.full(num_points, CrustType.OCEANIC, dtype=np.uint8),
            thickness=np.full(num_points, DEFAULTS.OCEANIC_CRUST_THICKNESS_KM, dtype=np.float32),
            elevation=np.full(num_points, DEFAULTS.DEFAULT_ABYSSAL_PLAIN_ELEVATION_KM, dtype=np.float32),
            oceanic_age=np.zeros(num_points, dtype=np.float32),
            ridge_direction=np.zeros((num_points, 3), dtype=np.float32),
            orogeny_age=np.zeros(num_points, dtype=np.float32),
            orogeny_type=np.full(num_points, OrogenyType.NONE, dtype=np.uint8),
            fold_direction=np.zeros((num_points, 3), dtype=np.float32),
        )

    def __len__(self) -> int:
        return int(len(self.crust_type))

    def sample(self, index: int) -> CrustSample:
        return CrustSample(
            crust_type=CrustType(int(self.crust_type[index])),
            thickness=float(self.thickness[index]),
            elevation=float(self.elevation[index]),
            oceanic_age=float(self.oceanic_age[index]),
            ridge_direction=tuple(float(v) for v in self.ridge_direction[index]),
            orogeny_age=float(self.orogeny_age[index]),
            orogeny_type=OrogenyType(int(self.orogeny_type[index])),
            fold_direction=tuple(float(v) for v in self.fold_direction[index]),
        )

    def arrays(self) -> dict[str, np.ndarray]:
        """All fields by name, in a stable order."""
        return {
            "crust_type": self.crust_type,
            "thickness": self.thickness,
            "elevation": self.elevation,
            "oceanic_age": self.oceanic_age,
            "ridge_direction": self.ridge_direction,
            "orogeny_age": self.orogeny_age,
            "orogeny_type": self.orogeny_type,
            "fold_direction": self.fold_direction,
        }


@dataclass
class Adjacency:
    """
    Neighbor relation between sample points, stored in CSR form:
    the neighbors of point i are indices[indptr[i]:indptr[i + 1]].
    """
    indptr: np.ndarray
    indices: np.ndarray
    triangles: np.ndarray

    @classmethod
    def from_lists(cls, neighbor_lists, triangles: Optional[np.ndarray] = None) -> Adjacency:
        counts = [len(n) if n is not None else 0 for n in neighbor_lists]
        indptr = np.zeros(len(counts) + 1, dtype=np.int64)
        np.cumsum(counts, out=indptr[1:])
        if indptr[-1] > 0:
            indices = np.concatenate(
                [np.asarray(n, dtype=np.int64) for n in neighbor_lists if n is not None and len(n) > 0]
            )
        else:
            indices = np.zeros(0, dtype=np.int64)
        if triangles is None:
            triangles = np.zeros((0, 3), dtype=np.int64)
        return cls(indptr=indptr, indices=indices, triangles=np.asarray(triangles, dtype=np.int64))

    @property
    def num_points(self) -> int:
        return int(len(self.indptr) - 1)

    @property
    def num_triangles(self) -> int:
        return int(len(self.triangles))

    def neighbors_of(self, index: int) -> np.ndarray:
        if index < 0 or index >= self.num_points:
            return np.zeros(0, dtype=np.int64)
        return self.indices[self.indptr[index]:self.indptr[index + 1]]

    def neighbor_lists(self) -> list[list[int]]:
        return [self.neighbors_of(i).tolist() for i in range(self.num_points)]

    def degrees(self) -> np.ndarray:
        return np.diff(self.indptr)


@dataclass
class AdjacencyBuildResult:
    """Outcome of an adjacency build: either an Adjacency or an error message."""
    adjacency: Optional[Adjacency] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.adjacency is not None and self.error is None


@dataclass
class PlanetState:
    """Everything produced by one rebuild of the planet."""
    points: np.ndarray
    seeds: np.ndarray
    plate_ids: np.ndarray
    plates: list[Plate]
    crust: CrustData
    settings: dict
    settings_hash: str
    adjacency: Optional[Adjacency] = None
    boundary_flags: Optional[np.ndarray] = None

    @property
    def num_points(self) -> int:
        return int(len(self.points))

    @property
    def num_plates(self) -> int:
        return len(self.plates)

    @property
    def is_empty(self) -> bool:
        return self.num_points == 0

    def continental_point_fraction(self) -> float:
        if self.is_empty:
            return 0.0
        return float(np.count_nonzero(self.crust.crust_type == CrustType.CONTINENTAL)) / self.num_points

    def num_boundary_points(self) -> int:
        if self.boundary_flags is None:
            return 0
        return int(np.count_nonzero(self.boundary_flags))
