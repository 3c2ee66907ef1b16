# planet_generator/boundaries.py

"""
================================================================================
PLATE BOUNDARY DETECTION
================================================================================
Flags the sample points that touch another plate. A point is a boundary
point when at least one of its neighbors belongs to a different plate.

Data Contract:
---------------
- Inputs:
    - plate_ids: the plate of every point.
    - neighbors: an Adjacency, or one neighbor list per point.
- Outputs:
    - A bool array with one flag per point.
- Side Effects: Logs the stage timing.
- Invariants: a point without a neighbor list has no neighbors (flag False);
  neighbor indices outside the point range are ignored.
================================================================================
"""
import logging
import time
from typing import Mapping, Optional, Sequence, Union

import numpy as np
from numba import njit

from . import config as DEFAULTS
from .models import Adjacency
from .parallel import parallel_map

_module_logger = logging.getLogger(__name__)


@njit(nogil=True)
def _boundary_kernel(plate_ids, indptr, indices, start, stop, out):
    """
    Scans points [start, stop). Each point only reads the global arrays and
    writes its own flag, so disjoint ranges can run concurrently.
    """
    num_points = plate_ids.shape[0]
    num_rows = indptr.shape[0] - 1
    for i in range(start, stop):
        if i >= num_rows:
            out[i] = False
            continue
        my_plate = plate_ids[i]
        is_boundary = False
        for k in range(indptr[i], indptr[i + 1]):
            j = indices[k]
            if j >= 0 and j < num_points and plate_ids[j] != my_plate:
                is_boundary = True
                break
        out[i] = is_boundary


def _as_csr(neighbors: Union[Adjacency, Mapping, Sequence]) -> tuple[np.ndarray, np.ndarray]:
    if isinstance(neighbors, Adjacency):
        return neighbors.indptr.astype(np.int64), neighbors.indices.astype(np.int64)
    if isinstance(neighbors, Mapping):
        # {point: [neighbors]}; absent keys have no neighbors. Keys may be
        # strings, as in JSON-loaded adjacency.
        by_index = {int(k): v for k, v in neighbors.items()}
        num_rows = max((k + 1 for k in by_index), default=0)
        neighbors = [by_index.get(i) for i in range(num_rows)]
    adjacency = Adjacency.from_lists(neighbors)
    return adjacency.indptr, adjacency.indices


def detect_plate_boundaries(
    plate_ids,
    neighbors: Union[Adjacency, Mapping, Sequence, None],
    parallel: bool = True,
    chunk_size: int = DEFAULTS.BOUNDARY_CHUNK_SIZE,
    logger: Optional[logging.Logger] = None
) -> np.ndarray:
    """
    Computes the boundary flag of every point.

    Args:
        plate_ids: plate id per point.
        neighbors: Adjacency or a sequence of per-point neighbor lists. The
            sequence may be shorter than the point count; None counts as empty.
        parallel (bool): split the points into chunks run on the thread pool.
        chunk_size (int): points per task in parallel mode.
        logger (logging.Logger, optional): receives the stage timing.
    """
    logger = logger or _module_logger
    plate_ids = np.ascontiguousarray(plate_ids, dtype=np.int64)
    num_points = len(plate_ids)
    out = np.zeros(num_points, dtype=np.bool_)

    if num_points == 0:
        return out
    if neighbors is None:
        neighbors = []

    indptr, indices = _as_csr(neighbors)

    def work_per_chunk(bounds: tuple[int, int]):
        _boundary_kernel(plate_ids, indptr, indices, bounds[0], bounds[1], out)

    if parallel:
        chunks = [(start, min(start + chunk_size, num_points)) for start in range(0, num_points, chunk_size)]
    else:
        chunks = [(0, num_points)]

    start_time = time.perf_counter()
    parallel_map(work_per_chunk, chunks, parallel=parallel)
    elapsed_ms = (time.perf_counter() - start_time) * 1000.0
    mode = "parallelized" if parallel else "sequential"
    logger.info(f"Boundary detection: {num_points} points {mode} in {elapsed_ms:.2f}ms")

    return out
