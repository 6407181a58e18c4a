from dataclasses import replace
from types import SimpleNamespace

import pytest

curses = pytest.importorskip("curses")

from conftest import make_rng  # noqa: E402
from game_logic import Point, SnakeConfig  # noqa: E402
import terminal_ui  # noqa: E402
from terminal_ui import (  # noqa: E402
    PAUSE,
    QUIT,
    RESTART,
    WELCOME_LINES,
    GameSession,
    decode_key,
    run_game,
)
from utils import board_size  # noqa: E402


class TestDecodeKey:
    @pytest.mark.parametrize(
        "key,expected",
        [
            (curses.KEY_UP, "up"),
            (curses.KEY_DOWN, "down"),
            (curses.KEY_LEFT, "left"),
            (curses.KEY_RIGHT, "right"),
            (ord("w"), "up"),
            (ord("S"), "down"),
            (ord("a"), "left"),
            (ord("D"), "right"),
            (ord(" "), PAUSE),
            (ord("p"), PAUSE),
            (ord("r"), RESTART),
            (ord("q"), QUIT),
        ],
    )
    def test_key_codes(self, key, expected):
        assert decode_key(key) == expected

    @pytest.mark.parametrize(
        "sequence,expected",
        [("\x1b[A", "up"), ("\x1b[B", "down"), ("\x1b[C", "right"), ("\x1b[D", "left"), ("w", "up")],
    )
    def test_raw_sequences(self, sequence, expected):
        assert decode_key(sequence) == expected

    @pytest.mark.parametrize("key", [ord("x"), -1, "\x1b[Z", "xyz"])
    def test_unmapped(self, key):
        assert decode_key(key) is None


def make_session(width=12, height=8):
    return GameSession(SnakeConfig(width=width, height=height), board_size(width, height), rng=make_rng())


class TestGameSession:
    def test_starts_paused_behind_welcome(self):
        session = make_session()
        assert session.state.paused
        assert not session.has_started
        assert session.dialog_lines() == WELCOME_LINES
        assert session.state.snake[0] == Point(6, 4)

    def test_tick_before_start_is_frozen(self):
        session = make_session()
        before = session.state
        assert session.advance() == before

    def test_space_starts_then_toggles_pause(self):
        session = make_session()
        session.handle(PAUSE)
        assert session.has_started
        assert not session.state.paused
        assert session.dialog_lines() is None
        session.handle(PAUSE)
        assert session.state.paused
        assert "(paused)" in session.status_text()

    def test_arrow_starts_and_queues(self):
        session = make_session()
        session.handle("up")
        assert session.has_started
        assert not session.state.paused
        assert session.state.next_direction == "up"
        session.advance()
        assert session.state.snake[0] == Point(6, 3)

    def test_reverse_arrow_starts_but_keeps_heading(self):
        session = make_session()
        session.handle("left")
        assert session.has_started
        assert session.state.next_direction == "right"

    def test_runs_into_wall_and_shows_game_over(self):
        session = make_session()
        session.handle(PAUSE)
        for _ in range(6):
            session.advance()
        assert session.state.game_over
        lines = session.dialog_lines()
        assert lines[0] == "Game Over"
        assert f"Score: {session.state.score}" in lines
        assert "Press R to restart" in lines

    def test_win_dialog(self):
        session = make_session()
        session.handle(PAUSE)
        session.state = replace(session.state, won=True, game_over=True, score=93)
        assert session.dialog_lines()[0] == "You Win!"
        assert "Score: 93" in session.dialog_lines()

    def test_restart_builds_fresh_paused_state(self):
        session = make_session()
        session.handle(PAUSE)
        session.advance()
        assert session.handle(RESTART)
        assert not session.has_started
        assert session.state.paused
        assert session.state.score == 0
        assert session.state.snake[0] == Point(6, 4)

    def test_resize_rebuilds_board(self):
        session = make_session()
        session.handle(PAUSE)
        session.resize(board_size(20, 10))
        assert (session.state.width, session.state.height) == (20, 10)
        assert session.state.snake[0] == Point(10, 5)
        assert not session.has_started

    def test_quit(self):
        assert make_session().handle(QUIT) is False

    def test_seeded_sessions_place_identical_food(self):
        size = board_size(12, 8)
        first = GameSession(SnakeConfig(seed=7), size)
        second = GameSession(SnakeConfig(seed=7), size)
        assert first.state.food == second.state.food


class FakeWindow:
    """Replays a scripted key sequence in place of a curses window."""

    def __init__(self, keys, size=(24, 80), resized_to=None):
        self.keys = list(keys)
        self.size = size
        self.resized_to = resized_to
        self.nodelay_calls = []

    def getch(self):
        if not self.keys:
            raise AssertionError("key script exhausted before quit")
        key = self.keys.pop(0)
        if key == curses.KEY_RESIZE and self.resized_to is not None:
            self.size = self.resized_to
        return key

    def getmaxyx(self):
        return self.size

    def keypad(self, flag):
        pass

    def timeout(self, delay):
        pass

    def nodelay(self, flag):
        self.nodelay_calls.append(flag)


class StepClock:
    def __init__(self, step):
        self.now = 0.0
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


@pytest.fixture()
def frames(monkeypatch):
    """Swap the curses renderer for one that records (size, state, started) per draw."""
    drawn = []

    class RecordingRenderer:
        def __init__(self, stdscr):
            pass

        def draw(self, session):
            drawn.append((session.size, session.state, session.has_started))

    monkeypatch.setattr(terminal_ui, "TerminalRenderer", RecordingRenderer)
    monkeypatch.setattr(curses, "curs_set", lambda visibility: None)
    # A stopped clock keeps the loop from ticking unless a test says otherwise.
    monkeypatch.setattr(terminal_ui, "time", SimpleNamespace(monotonic=lambda: 0.0))
    return drawn


def fixed_config(**overrides):
    return SnakeConfig(**{"width": 12, "height": 8, "seed": 3, **overrides})


class TestRunGame:
    def test_quit_returns_score(self, frames):
        score = run_game(FakeWindow([ord("q")]), fixed_config(), fit_terminal=False)
        assert score == 0
        assert len(frames) == 1
        assert frames[0][0] == board_size(12, 8)

    @pytest.mark.parametrize(
        "final,expected",
        [("A", "up"), ("B", "down"), ("C", "right"), ("D", "right")],
    )
    def test_raw_arrow_sequence_reaches_session(self, frames, final, expected):
        window = FakeWindow([27, ord("["), ord(final), ord("q")])
        run_game(window, fixed_config(), fit_terminal=False)
        _, state, started = frames[-1]
        assert started
        # ESC [ D is "left", which cannot reverse the starting heading.
        assert state.next_direction == expected
        assert window.nodelay_calls == [True, False]

    def test_lone_escape_is_ignored(self, frames):
        window = FakeWindow([27, -1, ord("q")])
        run_game(window, fixed_config(), fit_terminal=False)
        assert len(frames) == 1
        assert window.nodelay_calls == [True, False]

    def test_alt_letter_is_not_read_as_wasd(self, frames):
        run_game(FakeWindow([27, ord("a"), ord("q")]), fixed_config(), fit_terminal=False)
        assert len(frames) == 1
        assert not frames[-1][2]

    def test_plain_keys_reach_session(self, frames):
        run_game(FakeWindow([ord("w"), ord("q")]), fixed_config(), fit_terminal=False)
        _, state, started = frames[-1]
        assert started
        assert not state.paused
        assert state.next_direction == "up"

    def test_resize_rebuilds_board_when_fitting_terminal(self, frames):
        window = FakeWindow([ord(" "), curses.KEY_RESIZE, ord("q")], size=(24, 80), resized_to=(20, 40))
        run_game(window, fixed_config())
        assert frames[0][0] == board_size(36, 14)
        size, state, started = frames[-1]
        assert size == board_size(18, 10)
        assert (state.width, state.height) == (18, 10)
        assert state.paused
        assert not started

    def test_resize_only_redraws_fixed_board(self, frames):
        window = FakeWindow([ord(" "), curses.KEY_RESIZE, ord("q")], size=(24, 80), resized_to=(20, 40))
        run_game(window, fixed_config(width=20, height=10), fit_terminal=False)
        assert len(frames) == 3
        size, state, started = frames[-1]
        assert size == board_size(20, 10)
        assert state is frames[-2][1]
        assert started

    def test_ticks_on_fixed_interval_and_catches_up(self, frames, monkeypatch):
        # Every clock read jumps 200 ms against a 100 ms interval, so each pass ticks once.
        monkeypatch.setattr(terminal_ui, "time", SimpleNamespace(monotonic=StepClock(0.2)))
        window = FakeWindow([ord(" "), -1, -1, ord("q")])
        score = run_game(window, fixed_config(tick_ms=100), fit_terminal=False)
        _, state, _ = frames[-1]
        assert state.head == Point(9, 4)
        assert score == state.score
