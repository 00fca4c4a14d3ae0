"""Text and image rendering of configurations and their executions."""

import numpy as np
from PIL import Image
from typing import List

from .rule import CELL_FIELDS

VALUE, INTERMEDIATE, CAPTURED, COLOR, MEM_HAS_0, MEM_HAS_1 = range(len(CELL_FIELDS))

# Memory symbol keyed by (contains 0, contains 1)
MEMORY_SYMBOLS = {
    (False, False): "_",
    (True, False): ".",
    (False, True): ",",
    (True, True): ";",
}

ZERO_COLOR = np.array([30, 30, 30], dtype=np.uint8)
ONE_COLOR = np.array([255, 255, 255], dtype=np.uint8)
RED_COLOR = np.array([220, 60, 60], dtype=np.uint8)
BLUE_COLOR = np.array([60, 110, 220], dtype=np.uint8)


def format_state(state: np.ndarray) -> str:
    """
    Render a snapshot (from Configuration.to_array) as three lines.

    The first line holds the values (X for a captured intermediate symbol),
    the second the colour of the local counter (R or B), the third the local
    memory (_ for empty, . for {0}, , for {1}, ; for {0, 1}). Boolean cells
    are left blank on the second and third lines.
    """
    values, colors, memories = [], [], []
    for cell in state.T:
        if cell[INTERMEDIATE] and cell[CAPTURED]:
            values.append("X")
        else:
            values.append("1" if cell[VALUE] else "0")

        if not cell[INTERMEDIATE]:
            colors.append(" ")
            memories.append(" ")
            continue

        colors.append("R" if cell[COLOR] else "B")
        memories.append(MEMORY_SYMBOLS[bool(cell[MEM_HAS_0]), bool(cell[MEM_HAS_1])])

    return "\n".join(["".join(values), "".join(colors), "".join(memories)])


def format_configuration(config) -> str:
    return format_state(config.to_array())


def print_trace(history: List[np.ndarray]):
    """Print every snapshot of an execution, three lines each."""
    for state in history:
        print(format_state(state))


def render_trace(history: List[np.ndarray], cell_size: int = 8) -> np.ndarray:
    """Space-time diagram of an execution as an RGB image array, one row per sweep."""
    states = np.stack(history)  # (sweeps, fields, size)
    values = states[:, VALUE, :]
    intermediate = states[:, INTERMEDIATE, :]
    red = states[:, COLOR, :]

    img = np.empty(values.shape + (3,), dtype=np.uint8)
    img[:] = ZERO_COLOR
    img[values & ~intermediate] = ONE_COLOR
    img[intermediate & red] = RED_COLOR
    img[intermediate & ~red] = BLUE_COLOR

    # darken symbols whose character was taken
    taken = intermediate & states[:, CAPTURED, :]
    img[taken] = img[taken] // 2

    return np.repeat(np.repeat(img, cell_size, axis=0), cell_size, axis=1)


def save_trace_image(history: List[np.ndarray], filepath: str, cell_size: int = 8):
    """Save the space-time diagram of an execution as PNG."""
    Image.fromarray(render_trace(history, cell_size)).save(filepath)
