import numpy as np
from PIL import Image

from density_ca.automaton import Configuration
from density_ca.visualize import (
    BLUE_COLOR,
    ONE_COLOR,
    ZERO_COLOR,
    format_configuration,
    format_state,
    print_trace,
    render_trace,
    save_trace_image,
)


def test_boolean_configuration_has_blank_signal_lines() -> None:
    assert format_configuration(Configuration(0b011, 3)) == "110\n   \n   "


def test_trace_text_of_three_cell_majority() -> None:
    history = Configuration(0b011, 3).trace()

    assert [format_state(state) for state in history] == [
        "110\n   \n   ",
        "X1X\nBBB\n,,;",
        "XXX\nRRR\n_,,",
        "111\n   \n   ",
    ]


def test_print_trace(capsys) -> None:
    print_trace(Configuration(0b0001, 4).trace())

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 4 * 3
    assert lines[0] == "1000"
    assert lines[-3] == "0000"


def test_render_trace_draws_one_row_per_snapshot() -> None:
    history = Configuration(0b011, 3).trace()
    img = render_trace(history, cell_size=2)

    assert img.shape == (8, 6, 3)
    assert img.dtype == np.uint8
    assert (img[0, 0] == ONE_COLOR).all()
    assert (img[0, 4] == ZERO_COLOR).all()
    # uncaptured blue signal on the first sweep
    assert (img[2, 2] == BLUE_COLOR).all()
    # captured symbols are drawn darker
    assert (img[2, 0] == BLUE_COLOR // 2).all()
    assert (img[-1] == ONE_COLOR).all()


def test_save_trace_image(tmp_path) -> None:
    history = Configuration(0b00101, 5).trace()
    path = tmp_path / "trace.png"

    save_trace_image(history, str(path), cell_size=3)

    with Image.open(path) as image:
        assert image.size == (5 * 3, len(history) * 3)
