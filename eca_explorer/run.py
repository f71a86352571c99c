"""Generation sequence of a single automaton run and the loop that draws it."""

import numpy as np
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .automaton import CELL_WIDTH, EdgeMode, Rule, as_row, random_row, step
from .errors import ConfigError
from .terminal import terminal_size


@dataclass(frozen=True)
class RunConfig:
    """Settings fixed for the lifetime of a run."""
    rule: Rule
    edge_mode: EdgeMode = EdgeMode.WRAP
    generations: Optional[int] = None  # None: as many rows as the terminal has
    delay_ms: Optional[int] = None

    def __post_init__(self):
        if self.generations is not None and self.generations < 1:
            raise ConfigError(f"generations must be at least 1, got {self.generations}")
        if self.delay_ms is not None and self.delay_ms < 0:
            raise ConfigError(f"delay must not be negative, got {self.delay_ms}")


class AutomatonRun:
    """One-shot iterator over the rows of a run, starting with the initial row.

    Each row is computed only when pulled, so a consumer can draw (and pause)
    between generations.
    """

    def __init__(self, initial: np.ndarray, config: RunConfig, generations: int):
        if generations < 1:
            raise ConfigError(f"generations must be at least 1, got {generations}")
        self.config = config
        self.generations = generations
        self.generation = 0
        self._row = as_row(initial).copy()
        self._row.setflags(write=False)

    @property
    def width(self) -> int:
        return len(self._row)

    def __iter__(self) -> "AutomatonRun":
        return self

    def __next__(self) -> np.ndarray:
        if self.generation >= self.generations:
            raise StopIteration
        if self.generation > 0:
            row = step(self._row, self.config.rule, self.config.edge_mode)
            row.setflags(write=False)
            self._row = row
        self.generation += 1
        return self._row


def resolve_run(
    config: RunConfig,
    initial: Optional[np.ndarray] = None,
    density: float = 0.5,
    size_query: Optional[Callable[[], Tuple[int, int]]] = None,
    rng: Optional[np.random.Generator] = None,
) -> AutomatonRun:
    """Fill in the row width and generation count the user left to the terminal."""
    generations = config.generations
    if initial is None or generations is None:
        columns, lines = (size_query or terminal_size)()
        if initial is None:
            initial = random_row(columns // CELL_WIDTH, density=density, rng=rng)
        if generations is None:
            generations = lines
    return AutomatonRun(initial, config, generations)


def play(run: AutomatonRun, renderer, delay_ms: Optional[int] = None) -> int:
    """Draw every row of ``run``, pausing ``delay_ms`` between rows.

    Stops early without error when the renderer cannot continue (a key was
    pressed, the terminal went away). Returns the number of rows drawn.
    """
    drawn = 0
    for index, row in enumerate(run):
        if not renderer.draw(row, index):
            break
        drawn += 1
        if run.generation >= run.generations:
            break
        if not renderer.wait(delay_ms or 0):
            break
    return drawn
