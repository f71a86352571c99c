"""ECA Explorer - Watch elementary cellular automata evolve in the terminal."""

from .automaton import EdgeMode, Rule, step
from .run import AutomatonRun, RunConfig, play

__all__ = ["EdgeMode", "Rule", "step", "AutomatonRun", "RunConfig", "play"]
