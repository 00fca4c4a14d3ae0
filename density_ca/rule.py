"""Per-cell state encoding and the sequential local rule for density classification."""

import numpy as np
from dataclasses import dataclass, replace
from typing import Tuple

# Widest ring the packed representation accepts (one 32-bit word per field).
MAX_SIZE = 31

# Bit k of a cell code holds CELL_FIELDS[k].
CELL_FIELDS: Tuple[str, ...] = (
    "value",
    "intermediate",
    "captured",
    "color",
    "mem_has_0",
    "mem_has_1",
)

NUM_CODES = 1 << len(CELL_FIELDS)


@dataclass(frozen=True)
class CellState:
    """The six attributes of a single cell.

    A Boolean cell (``intermediate`` False) only exposes ``value``, but the
    other flags are kept as they were left: reverting to Boolean never clears
    them, and later transitions may read them.
    """
    value: bool = False
    intermediate: bool = False  # symbol from the signal alphabet
    captured: bool = False  # original value stored in memory (shown as X)
    color: bool = False  # phase of the local counter, R when set
    mem_has_0: bool = False
    mem_has_1: bool = False

    @classmethod
    def from_bits(cls, bits: int) -> "CellState":
        """Decode a 6-bit cell code."""
        return cls(**{name: bool(bits >> k & 1) for k, name in enumerate(CELL_FIELDS)})

    def to_bits(self) -> int:
        """Encode as a 6-bit cell code."""
        return sum(1 << k for k, name in enumerate(CELL_FIELDS) if getattr(self, name))

    def remembers(self, value: bool) -> bool:
        """Whether the memory set contains ``value``."""
        return self.mem_has_1 if value else self.mem_has_0

    def remember(self, value: bool) -> "CellState":
        """Add ``value`` to the memory set."""
        if value:
            return replace(self, mem_has_1=True)
        return replace(self, mem_has_0=True)


def transition(cell: CellState, left: CellState) -> CellState:
    """Next state of ``cell`` given its left neighbour. The neighbour is never modified."""
    if not left.intermediate:
        if not cell.intermediate:
            # 00 -> 0, 11 -> 1
            if cell.value == left.value:
                return cell
            # 01 or 10: kick start a signal, taking our own character
            return replace(cell.remember(cell.value), intermediate=True, captured=True)

        # a resolved value overwrites the signal
        return replace(cell, intermediate=False, value=left.value)

    if not cell.intermediate or cell.color != left.color:
        # scanning: follow the left colour and memory, then try to take our character
        cell = replace(
            cell,
            intermediate=True,
            color=left.color,
            mem_has_0=left.mem_has_0,
            mem_has_1=left.mem_has_1,
        )
        if cell.captured or cell.remembers(cell.value):
            return cell
        return replace(cell.remember(cell.value), captured=True)

    # same colour: this cell is the front of the signal
    if left.mem_has_0 and left.mem_has_1:
        return replace(cell, color=not cell.color, mem_has_0=False, mem_has_1=False)

    # Incomplete memory resolves to 1 only on evidence of a 1; anything else,
    # including an empty memory, falls back to 0.
    return replace(cell, intermediate=False, value=left.mem_has_1)


def build_transition_table() -> np.ndarray:
    """Tabulate ``transition`` over every (left, cell) pair of cell codes."""
    table = np.zeros((NUM_CODES, NUM_CODES), dtype=np.uint8)
    for left_bits in range(NUM_CODES):
        left = CellState.from_bits(left_bits)
        for cell_bits in range(NUM_CODES):
            table[left_bits, cell_bits] = transition(CellState.from_bits(cell_bits), left).to_bits()
    return table


TRANSITION_TABLE = build_transition_table()
