import sys

import pytest

from density_ca.main import main


def run_cli(monkeypatch, *argv: str) -> None:
    monkeypatch.setattr(sys, "argv", ["density-ca", *argv])
    main()


def test_check_prints_trace_and_verdict(monkeypatch, capsys) -> None:
    run_cli(monkeypatch, "check", "0b011", "3")

    out = capsys.readouterr().out
    assert out.startswith("110\n")
    assert "Sweeps: 3" in out
    assert "Majority 1, converged to 1: correct" in out


def test_check_reports_tie(monkeypatch, capsys) -> None:
    run_cli(monkeypatch, "check", "1", "2")

    assert "Tie: any outcome is accepted" in capsys.readouterr().out


def test_check_rejects_oversized_value(monkeypatch, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, "check", "0b111", "2")

    assert excinfo.value.code == 1
    assert capsys.readouterr().out.startswith("Error: value 0b111 does not fit in 2 cells")


def test_check_rejects_unparsable_value(monkeypatch, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, "check", "011", "3")

    assert excinfo.value.code == 1
    assert "Error parsing value '011'" in capsys.readouterr().out


def test_show_saves_image(monkeypatch, capsys, tmp_path) -> None:
    path = tmp_path / "figures" / "run.png"
    run_cli(monkeypatch, "show", "7", "--seed", "3", "--image", str(path), "--cell-size", "2")

    assert path.exists()
    assert "Saved space-time diagram" in capsys.readouterr().out


def test_show_rejects_oversized_ring(monkeypatch, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, "show", "40")

    assert excinfo.value.code == 1


def test_verify_small_sizes(monkeypatch, capsys) -> None:
    run_cli(monkeypatch, "verify", "--min-size", "2", "--max-size", "5", "-w", "1", "-q")

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Verifying sizes 2 to 5 on 1 workers"
    assert out[1:] == ["size 2 clean", "size 3 clean", "size 4 clean", "size 5 clean"]


def test_profile_prints_statistics(monkeypatch, capsys) -> None:
    run_cli(monkeypatch, "profile", "5")

    out = capsys.readouterr().out
    assert "Convergence profile for size 5:" in out
    assert "Configurations:  16" in out
    assert "Failures:        0" in out


def test_no_command_prints_help(monkeypatch) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch)

    assert excinfo.value.code == 1


@pytest.mark.parametrize("flag, number", [("--chunk-size", "-1"), ("--chunk-size", "0"), ("-w", "-2")])
def test_verify_rejects_non_positive_work_units(monkeypatch, capsys, flag: str, number: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, "verify", "--min-size", "3", "--max-size", "4", "-w", "1", flag, number, "-q")

    out = capsys.readouterr().out
    assert excinfo.value.code == 1
    assert out.startswith("Error: ")
    assert "clean" not in out
