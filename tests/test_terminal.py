import io
import sys
from typing import List

import pytest

from eca_explorer import terminal
from eca_explorer.automaton import ALIVE, DEAD, Rule, parse_row
from eca_explorer.main import main
from eca_explorer.run import AutomatonRun, RunConfig, play
from eca_explorer.terminal import CursesRenderer


class FakeCursesError(Exception):
    pass


class FakeWindow:
    """Screen buffer that scrolls by itself like curses when a write ends in
    the bottom-right cell of a scrolling window."""

    def __init__(self, lines: int, columns: int, keys=()):
        self.lines = lines
        self.columns = columns
        self.screen = [" " * columns for _ in range(lines)]
        self.keys = list(keys)
        self.scrolling = False
        self.scrolls = 0
        self.timeouts: List[int] = []
        self.fail_writes = False

    def getmaxyx(self):
        return self.lines, self.columns

    def keypad(self, flag):
        pass

    def scrollok(self, flag):
        self.scrolling = flag

    def idlok(self, flag):
        pass

    def scroll(self):
        self.scrolls += 1
        self.screen = self.screen[1:] + [" " * self.columns]

    def addstr(self, y, x, text):
        line = self.screen[y]
        self.screen[y] = (line[:x] + text + line[x + len(text):])[:self.columns]
        if self.scrolling and y == self.lines - 1 and x + len(text) >= self.columns:
            self.scroll()

    def insstr(self, y, x, text):
        if self.fail_writes:
            raise FakeCursesError("terminal gone")
        line = self.screen[y]
        self.screen[y] = (line[:x] + text + line[x:])[:self.columns]

    def refresh(self):
        pass

    def timeout(self, delay_ms):
        self.timeouts.append(delay_ms)

    def getch(self):
        key = self.keys.pop(0) if self.keys else -1
        if isinstance(key, type) and issubclass(key, BaseException):
            raise key()
        return key


class FakeCurses:
    error = FakeCursesError
    KEY_RESIZE = 410

    def __init__(self, window: FakeWindow, fail_on: str = ""):
        self.window = window
        self.fail_on = fail_on
        self.calls: List[str] = []

    def _record(self, name: str):
        self.calls.append(name)
        if name == self.fail_on:
            raise FakeCursesError(name)

    def initscr(self):
        self._record("initscr")
        return self.window

    def noecho(self):
        self._record("noecho")

    def echo(self):
        self._record("echo")

    def cbreak(self):
        self._record("cbreak")

    def nocbreak(self):
        self._record("nocbreak")

    def curs_set(self, visibility):
        self._record("curs_set")

    def endwin(self):
        self._record("endwin")


class FakeTTY(io.StringIO):
    def isatty(self) -> bool:
        return True


def install(monkeypatch: pytest.MonkeyPatch, window: FakeWindow, fail_on: str = "") -> FakeCurses:
    fake = FakeCurses(window, fail_on=fail_on)
    monkeypatch.setattr(terminal, "curses", fake)
    return fake


def decode(line: str) -> str:
    return line.replace(ALIVE, "1").replace(DEAD, "0")


class TestCursesRenderer:
    def test_full_width_rows_scroll_once_per_row(self, monkeypatch: pytest.MonkeyPatch) -> None:
        # Rule 170 shifts the row one cell to the left
        window = FakeWindow(lines=4, columns=8)
        install(monkeypatch, window)
        run = AutomatonRun(parse_row("0001"), RunConfig(rule=Rule(170)), 6)
        with CursesRenderer(wait_at_end=False) as renderer:
            assert play(run, renderer, delay_ms=1) == 6
        assert [decode(line) for line in window.screen] == ["0100", "1000", "0001", "0010"]
        assert window.scrolls == 2

    def test_wide_rows_are_cut_at_screen_edge(self, monkeypatch: pytest.MonkeyPatch) -> None:
        window = FakeWindow(lines=2, columns=6)
        install(monkeypatch, window)
        with CursesRenderer(wait_at_end=False) as renderer:
            assert renderer.draw(parse_row("10101"), 0)
            assert renderer.draw(parse_row("01010"), 1)
        assert [decode(line) for line in window.screen] == ["101", "010"]
        assert window.scrolls == 0

    def test_failed_write_stops_run(self, monkeypatch: pytest.MonkeyPatch) -> None:
        window = FakeWindow(lines=4, columns=8)
        install(monkeypatch, window)
        window.fail_writes = True
        with CursesRenderer(wait_at_end=False) as renderer:
            assert not renderer.draw(parse_row("0110"), 0)

    def test_wait_stops_on_key_or_resize(self, monkeypatch: pytest.MonkeyPatch) -> None:
        window = FakeWindow(lines=4, columns=8, keys=[-1, ord("q"), FakeCurses.KEY_RESIZE])
        install(monkeypatch, window)
        with CursesRenderer() as renderer:
            assert renderer.wait(20)
            assert not renderer.wait(20)
            assert not renderer.wait(0)
        assert window.timeouts == [20, 20, 0]

    def test_finish_waits_for_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        window = FakeWindow(lines=4, columns=8, keys=[FakeCurses.KEY_RESIZE, ord("x")])
        install(monkeypatch, window)
        with CursesRenderer() as renderer:
            renderer.finish()
        assert window.timeouts == [-1]
        assert window.keys == []

    def test_screen_released_on_exit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = install(monkeypatch, FakeWindow(lines=4, columns=8))
        with pytest.raises(RuntimeError):
            with CursesRenderer():
                raise RuntimeError("boom")
        assert fake.calls.count("endwin") == 1

    def test_screen_released_when_setup_fails(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = install(monkeypatch, FakeWindow(lines=4, columns=8), fail_on="cbreak")
        with pytest.raises(FakeCursesError):
            with CursesRenderer():
                pass
        assert fake.calls[-1] == "endwin"

    def test_hidden_cursor_is_optional(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = install(monkeypatch, FakeWindow(lines=4, columns=8), fail_on="curs_set")
        with CursesRenderer(wait_at_end=False):
            pass
        assert fake.calls.count("endwin") == 1


class TestMainWithScreen:
    def test_interrupt_releases_screen_and_exits_zero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        window = FakeWindow(lines=10, columns=20, keys=[KeyboardInterrupt])
        fake = install(monkeypatch, window)
        monkeypatch.setattr(sys, "stdout", FakeTTY())
        assert main(["90", "00100", "-g", "5", "-d", "10"]) == 0
        assert fake.calls.count("endwin") == 1
        assert decode(window.screen[0]).strip() == "00100"

    def test_waits_for_key_after_early_stop(self, monkeypatch: pytest.MonkeyPatch) -> None:
        window = FakeWindow(lines=10, columns=20, keys=[ord("q"), ord("q")])
        fake = install(monkeypatch, window)
        monkeypatch.setattr(sys, "stdout", FakeTTY())
        assert main(["90", "00100", "-g", "5", "-d", "10"]) == 0
        assert window.timeouts == [10, -1]
        assert window.keys == []
        assert fake.calls.count("endwin") == 1

    def test_no_wait_leaves_immediately(self, monkeypatch: pytest.MonkeyPatch) -> None:
        window = FakeWindow(lines=10, columns=20)
        install(monkeypatch, window)
        monkeypatch.setattr(sys, "stdout", FakeTTY())
        assert main(["90", "00100", "-g", "3", "--no-wait"]) == 0
        assert window.timeouts == [0, 0]
        assert [decode(line).strip() for line in window.screen[:3]] == ["00100", "01010", "10001"]
