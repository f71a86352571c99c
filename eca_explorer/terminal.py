"""Terminal query and renderers for drawing rows."""

import curses
import os
import sys
import time
from typing import Callable, Optional, TextIO, Tuple

import numpy as np

from .automaton import format_row
from .errors import TerminalSizeUnavailable


def terminal_size(stream: Optional[TextIO] = None) -> Tuple[int, int]:
    """Return (columns, lines) of the terminal attached to ``stream``."""
    stream = stream or sys.stdout
    try:
        size = os.get_terminal_size(stream.fileno())
    except (AttributeError, ValueError, OSError) as e:
        raise TerminalSizeUnavailable(
            f"cannot determine terminal size ({e}); pass INITIAL and --generations explicitly"
        ) from None
    if size.columns <= 0 or size.lines <= 0:
        raise TerminalSizeUnavailable(f"terminal reports an unusable size {size.columns}x{size.lines}")
    return size.columns, size.lines


class PlainRenderer:
    """Writes one line per row to a stream; used when stdout is not a terminal."""

    def __init__(self, stream: Optional[TextIO] = None, sleep: Callable[[float], None] = time.sleep):
        self.stream = stream or sys.stdout
        self.sleep = sleep

    def __enter__(self) -> "PlainRenderer":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stream.flush()
        return False

    def draw(self, row: np.ndarray, index: int) -> bool:
        try:
            self.stream.write(format_row(row) + "\n")
            self.stream.flush()
        except BrokenPipeError:
            return False
        return True

    def wait(self, delay_ms: int) -> bool:
        if delay_ms > 0:
            self.sleep(delay_ms / 1000)
        return True

    def finish(self):
        pass


class CursesRenderer:
    """Draws rows on the curses alternate screen.

    Rows fill the screen top to bottom, then the screen scrolls so the newest
    row is on the last line. Any key press ends the run. The screen is
    always released on exit, including on KeyboardInterrupt.
    """

    def __init__(self, wait_at_end: bool = True):
        self.wait_at_end = wait_at_end
        self.stdscr = None

    def __enter__(self) -> "CursesRenderer":
        self.stdscr = curses.initscr()
        try:
            curses.noecho()
            curses.cbreak()
            self.stdscr.keypad(True)
            try:
                curses.curs_set(0)
            except curses.error:
                pass  # Terminal cannot hide the cursor
            self.stdscr.scrollok(True)
            self.stdscr.idlok(True)
        except Exception:
            self._release()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self._release()
        return False

    def _release(self):
        if self.stdscr is None:
            return
        self.stdscr.keypad(False)
        curses.nocbreak()
        curses.echo()
        curses.endwin()
        self.stdscr = None

    def draw(self, row: np.ndarray, index: int) -> bool:
        max_y, max_x = self.stdscr.getmaxyx()
        if max_y < 1 or max_x < 1:
            return False
        text = format_row(row)[:max_x]
        if index < max_y:
            y = index
        else:
            self.stdscr.scroll()
            y = max_y - 1
        # insstr leaves the cursor where it is, so a full-width row on the
        # last line cannot scroll the window on its own
        try:
            self.stdscr.insstr(y, 0, text)
        except curses.error:
            return False
        self.stdscr.refresh()
        return True

    def wait(self, delay_ms: int) -> bool:
        """Pause between rows; False if a key was pressed or the terminal resized."""
        self.stdscr.timeout(delay_ms)
        return self.stdscr.getch() == -1

    def finish(self):
        if not self.wait_at_end:
            return
        self.stdscr.timeout(-1)
        while self.stdscr.getch() == curses.KEY_RESIZE:
            pass
