"""Plate boundary detection tests"""

import numpy as np

from planet_generator.boundaries import detect_plate_boundaries
from planet_generator.models import Adjacency


class TestBoundaryDetection:

    def setup_method(self):
        self.plate_ids = np.array([0, 0, 0, 1, 1, 1])
        self.neighbors = {0: [1], 1: [0, 2], 2: [1, 3], 3: [2, 4], 4: [3, 5], 5: [4]}
        self.expected = [False, False, True, True, False, False]

    def test_chain_of_two_plates(self):
        flags = detect_plate_boundaries(self.plate_ids, self.neighbors, parallel=False)

        assert flags.dtype == np.bool_
        assert flags.tolist() == self.expected

    def test_parallel_matches_sequential(self):
        lists = [self.neighbors[i] for i in range(6)]

        parallel = detect_plate_boundaries(self.plate_ids, lists, parallel=True, chunk_size=2)
        sequential = detect_plate_boundaries(self.plate_ids, lists, parallel=False)

        assert parallel.tolist() == self.expected
        assert sequential.tolist() == self.expected

    def test_accepts_adjacency(self):
        adjacency = Adjacency.from_lists([self.neighbors[i] for i in range(6)])

        flags = detect_plate_boundaries(self.plate_ids, adjacency, parallel=False)

        assert flags.tolist() == self.expected

    def test_missing_neighbor_lists_mean_no_neighbors(self):
        flags = detect_plate_boundaries(self.plate_ids, [[1], [0, 2], [1, 3]], parallel=False)

        assert flags.tolist() == [False, False, True, False, False, False]

    def test_none_entries_mean_no_neighbors(self):
        flags = detect_plate_boundaries(self.plate_ids, [[1], None, None, [2], [3], [4]], parallel=False)

        assert flags.tolist() == [False, False, False, True, False, False]

    def test_string_keyed_mapping(self):
        # Adjacency loaded from JSON has string keys.
        neighbors = {str(k): v for k, v in self.neighbors.items()}

        flags = detect_plate_boundaries(self.plate_ids, neighbors, parallel=False)

        assert flags.tolist() == self.expected

    def test_no_adjacency_at_all(self):
        flags = detect_plate_boundaries(self.plate_ids, None, parallel=False)

        assert flags.tolist() == [False] * 6

    def test_out_of_range_neighbors_are_ignored(self):
        flags = detect_plate_boundaries(np.array([0, 1]), [[7, -1], [0]], parallel=False)

        assert flags.tolist() == [False, True]

    def test_single_plate_has_no_boundaries(self):
        lists = [[(i + 1) % 10, (i - 1) % 10] for i in range(10)]

        flags = detect_plate_boundaries(np.zeros(10, dtype=np.int32), lists)

        assert not flags.any()

    def test_empty_input(self):
        flags = detect_plate_boundaries(np.zeros(0, dtype=np.int32), [])

        assert flags.shape == (0,)
