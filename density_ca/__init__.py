"""Sequential Density Classification - a ring automaton converging to the majority, checked exhaustively."""

from .automaton import Configuration, ConfigurationError, is_correct
from .rule import CellState, transition
from .search import ExhaustiveSearch, find_counter_example, search_all, search_size

__all__ = [
    "Configuration",
    "ConfigurationError",
    "is_correct",
    "CellState",
    "transition",
    "ExhaustiveSearch",
    "find_counter_example",
    "search_all",
    "search_size",
]
