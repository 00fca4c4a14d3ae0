"""Convergence statistics of the sequential rule over whole sizes."""

import numpy as np
from typing import Dict, Iterable, List, Optional
from dataclasses import dataclass, field

from .automaton import Configuration
from .search import candidate_range


@dataclass
class ConvergenceResult:
    """One execution measured against its initial majority."""
    value: int
    size: int
    majority: Optional[int]  # None on a tie
    sweeps: int
    converged: bool
    outcome: Optional[int]  # uniform final value, None if not converged
    correct: bool


@dataclass
class ConvergenceStats:
    """Aggregate over many executions of the same size."""
    size: int
    checked: int
    ties: int
    mean_sweeps: float
    max_sweeps: int
    sweep_histogram: List[int]  # index = number of sweeps
    failures: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "size": self.size,
            "checked": self.checked,
            "ties": self.ties,
            "mean_sweeps": self.mean_sweeps,
            "max_sweeps": self.max_sweeps,
            "sweep_histogram": self.sweep_histogram,
            "failures": self.failures,
        }


def measure(value: int, size: int) -> ConvergenceResult:
    """
    Run a configuration until convergence or the sweep budget, whichever comes first.

    Ties are run as well, so their sweep counts are available; their
    correctness is always True.
    """
    config = Configuration(value, size)
    majority = config.majority()
    config.trace()

    converged = config.has_converged()
    outcome = config.value & 1 if converged else None
    correct = majority is None or (converged and outcome == majority)

    return ConvergenceResult(
        value=value,
        size=size,
        majority=majority,
        sweeps=config.generation,
        converged=converged,
        outcome=outcome,
        correct=correct,
    )


def convergence_profile(
    size: int,
    values: Optional[Iterable[int]] = None,
    symmetric: bool = True,
) -> ConvergenceStats:
    """Sweep-count statistics over ``values`` (default: every candidate of the size), ties excluded."""
    if values is None:
        values = range(*candidate_range(size, symmetric))

    sweeps = []
    ties = 0
    failures = []
    for value in values:
        result = measure(value, size)
        if result.majority is None:
            ties += 1
            continue
        sweeps.append(result.sweeps)
        if not result.correct:
            failures.append(value)

    counts = np.array(sweeps, dtype=np.int64)
    histogram = np.bincount(counts) if len(counts) else np.zeros(0, dtype=np.int64)

    return ConvergenceStats(
        size=size,
        checked=len(sweeps) + ties,
        ties=ties,
        mean_sweeps=float(np.mean(counts)) if len(counts) else 0.0,
        max_sweeps=int(np.max(counts)) if len(counts) else 0,
        sweep_histogram=histogram.tolist(),
        failures=failures,
    )
