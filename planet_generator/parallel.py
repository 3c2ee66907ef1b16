# planet_generator/parallel.py

"""
================================================================================
FORK-JOIN TASK EXECUTION
================================================================================
Runs a list of independent tasks either on a pool of worker threads or one
after another in the calling thread. The task decomposition is the same in
both modes, so a stage produces bit-identical output whichever mode is
selected, as long as every task seeds its own random stream.

Data Contract:
---------------
- Inputs: a callable, a sequence of task arguments, and the `parallel` flag.
- Outputs: the list of task results, in the order of the inputs.
- Side Effects: whatever the tasks do. Tasks of one stage must write
  disjoint slices of shared output arrays.
- The call returns only after every task has finished (one barrier per stage).
================================================================================
"""
import multiprocessing
from multiprocessing.pool import ThreadPool
from typing import Callable, Iterable, Optional

from tqdm import tqdm


def default_worker_count() -> int:
    """Leaves one core free for the caller."""
    return max(1, multiprocessing.cpu_count() - 1)


def parallel_map(
    func: Callable,
    items: Iterable,
    parallel: bool = True,
    max_workers: Optional[int] = None,
    progress: bool = False,
    desc: Optional[str] = None,
) -> list:
    """
    Applies `func` to every item and returns the results in input order.

    Args:
        func: The task function. Called once per item.
        items: Task arguments.
        parallel (bool): Run on a thread pool if True, sequentially otherwise.
        max_workers (int, optional): Pool size. Defaults to cpu_count - 1.
        progress (bool): Show a tqdm progress bar.
        desc (str, optional): Label for the progress bar.
    """
    tasks = list(items)
    if not tasks:
        return []

    if not parallel or len(tasks) == 1:
        return [func(task) for task in tqdm(tasks, desc=desc, disable=not progress)]

    num_workers = min(max_workers or default_worker_count(), len(tasks))
    with ThreadPool(processes=num_workers) as pool:
        results_iterator = pool.imap(func, tasks)
        return list(tqdm(results_iterator, total=len(tasks), desc=desc, disable=not progress))
