import pytest

from density_ca.metrics import convergence_profile, measure


def test_measure_majority_run() -> None:
    result = measure(0b011, 3)

    assert result.majority == 1
    assert result.converged
    assert result.outcome == 1
    assert result.sweeps == 3
    assert result.correct


def test_measure_tie_is_always_correct() -> None:
    result = measure(0b01, 2)

    assert result.majority is None
    assert result.correct


def test_profile_of_size_four() -> None:
    stats = convergence_profile(4)

    assert stats.checked == 8
    assert stats.ties == 3
    assert stats.failures == []
    assert sum(stats.sweep_histogram) == 5
    assert stats.max_sweeps == len(stats.sweep_histogram) - 1
    assert 0 < stats.mean_sweeps <= stats.max_sweeps

    data = stats.to_dict()
    assert data["size"] == 4
    assert data["sweep_histogram"] == stats.sweep_histogram


def test_profile_over_explicit_values() -> None:
    stats = convergence_profile(3, values=[0b011, 0b001])

    assert stats.checked == 2
    assert stats.ties == 0
    assert stats.sweep_histogram[3] >= 1


@pytest.mark.parametrize("size", range(2, 9))
def test_convergence_within_sweep_budget(size: int) -> None:
    stats = convergence_profile(size)

    assert stats.failures == []
    assert stats.max_sweeps <= size + 1
