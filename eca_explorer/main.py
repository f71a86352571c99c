#!/usr/bin/env python3
"""CLI for running an elementary cellular automaton in the terminal."""

import argparse
import sys
from typing import List, Optional

import numpy as np

from .automaton import EdgeMode, Rule, parse_row
from .errors import ECAError
from .run import RunConfig, play, resolve_run
from .terminal import CursesRenderer, PlainRenderer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eca_explorer",
        description="Run an elementary (one-dimensional) cellular automaton in your terminal.",
    )
    parser.add_argument("rule", type=str, help="Wolfram code of the rule (0-255)")
    parser.add_argument(
        "initial", type=str, nargs="?", default=None,
        help="Initial cells as a string of 0s and 1s (default: random, as wide as the terminal)",
    )
    parser.add_argument(
        "-e", "--edges", type=str, default="wrap", metavar="{copy,crop,wrap}",
        help="How cells at the two edges find their missing neighbour (default: wrap)",
    )
    parser.add_argument(
        "-g", "--generations", type=int, default=None,
        help="Number of generations to show (default: terminal height)",
    )
    parser.add_argument(
        "-d", "--delay", type=int, default=None, metavar="MS",
        help="Milliseconds to pause between generations",
    )
    parser.add_argument("-s", "--seed", type=int, default=None, help="Random seed for the initial row")
    parser.add_argument(
        "--density", type=float, default=0.5,
        help="Fraction of live cells in a random initial row (default: 0.5)",
    )
    parser.add_argument(
        "--plain", action="store_true",
        help="Print rows to stdout instead of using the alternate screen",
    )
    parser.add_argument(
        "--no-wait", action="store_true",
        help="Leave the alternate screen without waiting for a key press",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print a run summary to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Validate everything before touching the screen
    try:
        rule = Rule.from_string(args.rule)
        edge_mode = EdgeMode.from_string(args.edges)
        initial = parse_row(args.initial) if args.initial is not None else None
        config = RunConfig(
            rule=rule,
            edge_mode=edge_mode,
            generations=args.generations,
            delay_ms=args.delay,
        )
        run = resolve_run(
            config,
            initial=initial,
            density=args.density,
            rng=np.random.default_rng(args.seed),
        )
    except ECAError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.plain or not sys.stdout.isatty():
        renderer = PlainRenderer()
    else:
        renderer = CursesRenderer(wait_at_end=not args.no_wait)

    drawn = 0
    try:
        with renderer:
            drawn = play(run, renderer, config.delay_ms)
            renderer.finish()
    except KeyboardInterrupt:
        pass

    if args.verbose:
        print(f"{rule.to_string()} ({rule.to_bits()}), {edge_mode.value} edges", file=sys.stderr)
        print(f"  Width:       {run.width}", file=sys.stderr)
        print(f"  Generations: {drawn}/{run.generations}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
