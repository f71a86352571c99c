"""Elementary (1D, two-state, radius-1) cellular automaton engine."""

import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import (
    ConfigError,
    EmptyRow,
    InvalidEdgeMode,
    InvalidInitialConfiguration,
    InvalidRule,
)

# Each cell is drawn two columns wide so the grid looks roughly square
ALIVE = "██"
DEAD = "╶╴"
CELL_WIDTH = 2


@dataclass(frozen=True)
class Rule:
    """Wolfram code (0-255) with its neighbourhood lookup table.

    Bit ``i`` of the code is the next state for the neighbourhood whose
    left-center-right cells spell ``i`` in binary (e.g. ``110`` -> bit 6).
    """
    number: int
    table: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        number = self.number
        if isinstance(number, bool) or not isinstance(number, (int, np.integer)):
            raise InvalidRule(f"rule must be an integer between 0 and 255, got {number!r}")
        if not 0 <= number <= 255:
            raise InvalidRule(f"rule must be between 0 and 255, got {number}")
        object.__setattr__(self, "number", int(number))
        table = np.array([(self.number >> i) & 1 for i in range(8)], dtype=np.uint8)
        table.setflags(write=False)
        object.__setattr__(self, "table", table)

    @classmethod
    def from_number(cls, number: int) -> "Rule":
        return cls(number)

    @classmethod
    def from_string(cls, text: str) -> "Rule":
        """Parse a rule given on the command line, e.g. '90'."""
        if not text.isdigit():
            raise InvalidRule(f"rule must be an integer between 0 and 255, got {text!r}")
        try:
            number = int(text)
        except ValueError:
            raise InvalidRule(f"rule must be an integer between 0 and 255, got {text!r}") from None
        return cls(number)

    def next_cell(self, left: int, center: int, right: int) -> int:
        """Next state of ``center`` given its two neighbours."""
        return int(self.table[(left << 2) | (center << 1) | right])

    def to_string(self) -> str:
        return f"Rule {self.number}"

    def to_bits(self) -> str:
        """Outputs for neighbourhoods 111 down to 000, as in Wolfram's tables."""
        return format(self.number, "08b")


class EdgeMode(Enum):
    COPY = "copy"   # Missing neighbour repeats the edge cell
    CROP = "crop"   # Missing neighbour is dead
    WRAP = "wrap"   # Row is a ring

    @classmethod
    def from_string(cls, text: str) -> "EdgeMode":
        try:
            return cls(text)
        except ValueError:
            choices = ", ".join(mode.value for mode in cls)
            raise InvalidEdgeMode(f"edges must be one of {choices}, got {text!r}") from None


def as_row(cells) -> np.ndarray:
    """Validate ``cells`` as a non-empty 1D row of 0/1 values."""
    row = np.asarray(cells, dtype=np.uint8)
    if row.ndim != 1:
        raise InvalidInitialConfiguration(f"row must be one-dimensional, got shape {row.shape}")
    if row.size == 0:
        raise EmptyRow("row must contain at least one cell")
    if row.max() > 1:
        raise InvalidInitialConfiguration("row cells must be 0 or 1")
    return row


def neighbor_left(row: np.ndarray, mode: EdgeMode) -> int:
    """Virtual left neighbour of the first cell."""
    if len(row) == 0:
        raise EmptyRow("row must contain at least one cell")
    if mode is EdgeMode.WRAP:
        return int(row[-1])
    if mode is EdgeMode.COPY:
        return int(row[0])
    return 0


def neighbor_right(row: np.ndarray, mode: EdgeMode) -> int:
    """Virtual right neighbour of the last cell."""
    if len(row) == 0:
        raise EmptyRow("row must contain at least one cell")
    if mode is EdgeMode.WRAP:
        return int(row[0])
    if mode is EdgeMode.COPY:
        return int(row[-1])
    return 0


def step(row: np.ndarray, rule: Rule, mode: EdgeMode) -> np.ndarray:
    """Compute the next generation. Always returns a new array."""
    cells = as_row(row)

    padded = np.empty(cells.size + 2, dtype=np.uint8)
    padded[0] = neighbor_left(cells, mode)
    padded[1:-1] = cells
    padded[-1] = neighbor_right(cells, mode)

    # Neighbourhood pattern (left, center, right) as a 3-bit index per cell
    index = (padded[:-2] << 2) | (padded[1:-1] << 1) | padded[2:]
    return rule.table[index]


def parse_row(text: str) -> np.ndarray:
    """Parse an initial configuration such as '0001000'."""
    if not text:
        raise EmptyRow("initial configuration must contain at least one cell")
    bad = sorted(set(text) - {"0", "1"})
    if bad:
        raise InvalidInitialConfiguration(
            f"initial configuration must only contain '0' or '1', found {''.join(bad)!r}"
        )
    return np.fromiter((c == "1" for c in text), dtype=np.uint8, count=len(text))


def random_row(width: int, density: float = 0.5, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Random row where each cell is alive with probability ``density``."""
    if width < 1:
        raise EmptyRow(f"random row needs at least one cell, got width {width}")
    if not 0.0 <= density <= 1.0:
        raise ConfigError(f"density must be between 0 and 1, got {density}")
    if rng is None:
        rng = np.random.default_rng()
    return (rng.random(width) < density).astype(np.uint8)


def format_row(row: np.ndarray, alive: str = ALIVE, dead: str = DEAD) -> str:
    return "".join(alive if cell else dead for cell in row)
