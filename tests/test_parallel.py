"""Fork-join task execution tests"""

import threading

from planet_generator.parallel import default_worker_count, parallel_map


class TestParallelMap:

    def test_results_keep_input_order(self):
        results = parallel_map(lambda x: x * x, range(100), parallel=True, max_workers=4)

        assert results == [x * x for x in range(100)]

    def test_sequential_mode_runs_in_caller_thread(self):
        caller = threading.get_ident()

        idents = parallel_map(lambda _: threading.get_ident(), range(10), parallel=False)

        assert set(idents) == {caller}

    def test_both_modes_agree(self):
        def task(x):
            return (x * 31) % 17

        assert parallel_map(task, range(64), parallel=True) == parallel_map(task, range(64), parallel=False)

    def test_empty_input(self):
        assert parallel_map(lambda x: x, [], parallel=True) == []

    def test_tasks_write_disjoint_slices(self):
        out = [0] * 40

        def task(i):
            out[i] = i + 1

        parallel_map(task, range(40), parallel=True, max_workers=3)

        assert out == list(range(1, 41))

    def test_progress_bar_does_not_change_results(self):
        assert parallel_map(str, range(5), progress=True, desc="test") == ["0", "1", "2", "3", "4"]

    def test_default_worker_count(self):
        assert default_worker_count() >= 1
