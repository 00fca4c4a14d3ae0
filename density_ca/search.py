"""Exhaustive parallel search for counterexamples to the density classification rule."""

import multiprocessing
import os
import time
import numpy as np
from typing import Callable, Iterator, List, Optional, Tuple
from dataclasses import dataclass

from .automaton import Configuration, ConfigurationError, is_correct
from .rule import MAX_SIZE
from .visualize import print_trace

DEFAULT_MIN_SIZE = 2
DEFAULT_MAX_SIZE = 30

Check = Callable[[int, int], bool]


@dataclass
class SearchResult:
    """Outcome of searching every configuration of one size."""
    size: int
    counter_example: Optional[int]
    checked: int  # candidates covered, ties included
    total: int
    elapsed: float

    @property
    def complete(self) -> bool:
        return self.checked == self.total

    @property
    def clean(self) -> bool:
        """No counterexample, and every candidate was covered."""
        return self.counter_example is None and self.complete


def candidate_range(size: int, symmetric: bool = True) -> Tuple[int, int]:
    """Half-open range of initial values to enumerate.

    With ``symmetric`` only values whose top bit is clear are covered: the
    complement of a configuration has the complementary majority.
    """
    if not 1 <= size <= MAX_SIZE:
        raise ConfigurationError(f"size must be between 1 and {MAX_SIZE}, got {size}")
    return 0, 1 << (size - 1 if symmetric else size)


def untied(values: np.ndarray, size: int) -> np.ndarray:
    """Drop the values with as many 0s as 1s among their ``size`` cells."""
    ones = np.zeros(len(values), dtype=np.int64)
    for k in range(size):
        ones += (values >> k) & 1
    return values[2 * ones != size]


def _check_chunk(task: Tuple[int, int, int, Check]) -> Tuple[int, Optional[int]]:
    """Worker: evaluate one chunk, returning (values covered, first failure or None)."""
    start, stop, size, check = task
    for value in untied(np.arange(start, stop, dtype=np.int64), size).tolist():
        if not check(value, size):
            return stop - start, value
    return stop - start, None


class ExhaustiveSearch:
    """Checks every initial configuration of a size, fanned out over worker processes."""

    def __init__(
        self,
        workers: Optional[int] = None,
        chunk_size: Optional[int] = None,
        symmetric: bool = True,
        check: Check = is_correct,
        verbose: bool = True,
    ):
        if workers is not None and workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        if chunk_size is not None and chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")

        self.workers = workers or os.cpu_count() or 1
        self.chunk_size = chunk_size
        self.symmetric = symmetric
        self.check = check
        self.verbose = verbose

    def _chunks(self, size: int) -> Iterator[Tuple[int, int, int, Check]]:
        start, stop = candidate_range(size, self.symmetric)
        chunk_size = self.chunk_size or max(1, min(1 << 14, (stop - start) // (self.workers * 16)))
        for lo in range(start, stop, chunk_size):
            yield lo, min(lo + chunk_size, stop), size, self.check

    def _results(self, size: int) -> Iterator[Tuple[int, Optional[int]]]:
        if self.workers == 1:
            for task in self._chunks(size):
                yield _check_chunk(task)
            return

        # leaving the pool terminates chunks still in flight once the caller stops
        with multiprocessing.Pool(processes=self.workers) as pool:
            for result in pool.imap_unordered(_check_chunk, self._chunks(size)):
                yield result

    def run(self, size: int) -> SearchResult:
        """Search one size, stopping at the first failure reported by any worker."""
        start, stop = candidate_range(size, self.symmetric)
        total = stop - start
        report_every = max(1, total // 10)
        next_report = report_every

        t0 = time.time()
        checked = 0
        counter_example = None

        results = self._results(size)
        try:
            for covered, found in results:
                checked += covered
                if found is not None:
                    counter_example = found
                    break
                if self.verbose and checked >= next_report:
                    print(f"  checked {checked}/{total} candidates")
                    next_report += report_every
        finally:
            results.close()

        return SearchResult(
            size=size,
            counter_example=counter_example,
            checked=checked,
            total=total,
            elapsed=time.time() - t0,
        )


def find_counter_example(
    size: int,
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
    symmetric: bool = True,
    check: Check = is_correct,
) -> Optional[int]:
    """First failing initial value of the given size (in completion order), or None."""
    search = ExhaustiveSearch(
        workers=workers,
        chunk_size=chunk_size,
        symmetric=symmetric,
        check=check,
        verbose=False,
    )
    return search.run(size).counter_example


def search_size(size: int, search: Optional[ExhaustiveSearch] = None) -> SearchResult:
    """Search one size and print a verdict, or the full execution of the counterexample."""
    if search is None:
        search = ExhaustiveSearch()

    result = search.run(size)

    if result.clean:
        print(f"size {size} clean")
    elif result.counter_example is None:
        print(f"size {size} incomplete: checked {result.checked}/{result.total} candidates")
    else:
        print("Error in the following example :")
        print_trace(Configuration(result.counter_example, size).trace())

    return result


def search_all(
    min_size: int = DEFAULT_MIN_SIZE,
    max_size: int = DEFAULT_MAX_SIZE,
    search: Optional[ExhaustiveSearch] = None,
) -> List[SearchResult]:
    """Run ``search_size`` for every size from min_size to max_size inclusive. Expensive!"""
    if search is None:
        search = ExhaustiveSearch()
    return [search_size(size, search) for size in range(min_size, max_size + 1)]
