"""Ring configuration of the sequential density-classification automaton."""

import numpy as np
from typing import List, Optional, Sequence

from .rule import CELL_FIELDS, MAX_SIZE, TRANSITION_TABLE, CellState

_LOOKUP = TRANSITION_TABLE.tolist()


class ConfigurationError(ValueError):
    """Raised for a size or initial value the packed representation cannot hold."""


class Configuration:
    """A ring of up to MAX_SIZE cells, packed as one integer word per cell attribute.

    Bit ``i`` of each word belongs to cell ``i``; the left neighbour of cell 0
    is cell ``size - 1``. Only ``value`` is set at construction, every other
    attribute starts cleared for all cells.
    """

    def __init__(self, value: int, size: int):
        if not 1 <= size <= MAX_SIZE:
            raise ConfigurationError(f"size must be between 1 and {MAX_SIZE}, got {size}")
        if value < 0 or value >> size:
            raise ConfigurationError(f"value {value:#b} does not fit in {size} cells")

        self.size = size
        self.value = value
        self.intermediate = 0
        self.captured = 0
        self.color = 0
        self.mem_has_0 = 0
        self.mem_has_1 = 0
        self.generation = 0

    @classmethod
    def random(cls, size: int, rng: Optional[np.random.Generator] = None) -> "Configuration":
        """Random initial configuration of the given size."""
        if not 1 <= size <= MAX_SIZE:
            raise ConfigurationError(f"size must be between 1 and {MAX_SIZE}, got {size}")
        if rng is None:
            rng = np.random.default_rng()
        return cls(int(rng.integers(0, 1 << size)), size)

    @classmethod
    def from_cells(cls, cells: Sequence[CellState]) -> "Configuration":
        """Build a configuration with arbitrary per-cell states, cell 0 first."""
        config = cls(0, len(cells))
        for index, cell in enumerate(cells):
            config.set_cell(index, cell)
        return config

    @property
    def mask(self) -> int:
        return (1 << self.size) - 1

    @property
    def sweep_budget(self) -> int:
        """Most sweeps ``is_correct`` runs before declaring failure."""
        return self.size + 1

    # Per-cell access

    def cell_bits(self, index: int) -> int:
        """6-bit code of cell ``index`` (bit k is CELL_FIELDS[k])."""
        return (
            (self.value >> index & 1)
            | (self.intermediate >> index & 1) << 1
            | (self.captured >> index & 1) << 2
            | (self.color >> index & 1) << 3
            | (self.mem_has_0 >> index & 1) << 4
            | (self.mem_has_1 >> index & 1) << 5
        )

    def set_cell_bits(self, index: int, bits: int):
        """Overwrite every attribute of cell ``index`` from a 6-bit code."""
        mask = 1 << index
        for k, name in enumerate(CELL_FIELDS):
            word = getattr(self, name)
            if bits >> k & 1:
                setattr(self, name, word | mask)
            else:
                setattr(self, name, word & ~mask)

    def get_cell(self, index: int) -> CellState:
        return CellState.from_bits(self.cell_bits(index))

    def set_cell(self, index: int, cell: CellState):
        self.set_cell_bits(index, cell.to_bits())

    def cells(self) -> List[CellState]:
        return [self.get_cell(i) for i in range(self.size)]

    def to_array(self) -> np.ndarray:
        """Snapshot as a (len(CELL_FIELDS), size) boolean array."""
        return np.array(
            [[getattr(self, name) >> i & 1 for i in range(self.size)] for name in CELL_FIELDS],
            dtype=bool,
        )

    # Bulk queries

    def all_resolved(self) -> bool:
        """True if no cell holds an intermediate symbol."""
        return self.intermediate == 0

    def is_uniform(self) -> bool:
        """True if every cell has the same value."""
        return self.value == 0 or self.value == self.mask

    def count_ones(self) -> int:
        return bin(self.value).count("1")

    # Dynamics

    def apply_local_function(self, left: int, index: int):
        """Apply the local rule to cell ``index``, reading the current state of cell ``left``."""
        new_bits = _LOOKUP[self.cell_bits(left)][self.cell_bits(index)]
        self.set_cell_bits(index, new_bits)

    def update(self):
        """One sequential sweep over cells 0..size-1.

        Cell 0 sees cell size-1 as it was before the sweep; every later cell
        sees its left neighbour as already updated in this sweep.
        """
        self.apply_local_function(self.size - 1, 0)
        for k in range(1, self.size):
            self.apply_local_function(k - 1, k)
        self.generation += 1

    def has_converged(self) -> bool:
        """No intermediate symbol left and all values equal."""
        return self.all_resolved() and self.is_uniform()

    def trace(self, max_sweeps: Optional[int] = None) -> List[np.ndarray]:
        """Sweep until convergence, recording a snapshot before and after every sweep."""
        if max_sweeps is None:
            max_sweeps = self.sweep_budget
        history = [self.to_array()]
        sweeps = 0
        while not self.has_converged() and sweeps < max_sweeps:
            self.update()
            sweeps += 1
            history.append(self.to_array())
        return history

    # Oracle

    def majority(self) -> Optional[int]:
        """Majority bit of the current values, or None on a tie."""
        ones = self.count_ones()
        zeros = self.size - ones
        if ones == zeros:
            return None
        return 1 if ones > zeros else 0

    def is_correct(self) -> bool:
        """Whether the automaton converges to the initial majority.

        Ties are accepted without running anything. A configuration that has
        not converged once more than ``size`` sweeps have run counts as
        incorrect.
        """
        majority = self.majority()
        if majority is None:
            return True

        sweeps = 0
        while not self.has_converged():
            if sweeps > self.size:  # convergence takes around size / 2
                return False
            self.update()
            sweeps += 1

        return majority == self.value & 1


def is_correct(value: int, size: int) -> bool:
    """Oracle verdict for a fresh configuration."""
    return Configuration(value, size).is_correct()
