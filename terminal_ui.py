# Curses player interface: key decoding, session flow, and the fixed-interval loop.
from __future__ import annotations

import curses
from dataclasses import replace
import logging
import time

try:
    from .game_logic import (
        DIRECTIONS,
        GameOptions,
        GameState,
        Rng,
        SnakeConfig,
        create_initial_state,
        queue_direction,
        tick,
        toggle_pause,
    )
    from .utils import (
        BODY,
        CELL_GLYPHS,
        CELL_WIDTH,
        CONTROLS_HEIGHT,
        FOOD,
        HEAD,
        HEADER_HEIGHT,
        BoardSize,
        board_size,
        encode_board,
        get_board_size,
        seeded_rng,
    )
except ImportError:
    from game_logic import (
        DIRECTIONS,
        GameOptions,
        GameState,
        Rng,
        SnakeConfig,
        create_initial_state,
        queue_direction,
        tick,
        toggle_pause,
    )
    from utils import (
        BODY,
        CELL_GLYPHS,
        CELL_WIDTH,
        CONTROLS_HEIGHT,
        FOOD,
        HEAD,
        HEADER_HEIGHT,
        BoardSize,
        board_size,
        encode_board,
        get_board_size,
        seeded_rng,
    )


logger = logging.getLogger(__name__)

ESCAPE = 27

PAUSE = "pause"
RESTART = "restart"
QUIT = "quit"

KEY_TO_COMMAND = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    ord("w"): "up",
    ord("W"): "up",
    ord("s"): "down",
    ord("S"): "down",
    ord("a"): "left",
    ord("A"): "left",
    ord("d"): "right",
    ord("D"): "right",
    ord(" "): PAUSE,
    ord("p"): PAUSE,
    ord("P"): PAUSE,
    ord("r"): RESTART,
    ord("R"): RESTART,
    ord("q"): QUIT,
    ord("Q"): QUIT,
}

# Raw ANSI arrows, for terminals that deliver escape sequences instead of keypad codes.
SEQUENCE_TO_DIRECTION = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
}

WELCOME_LINES = ("Welcome to Snake", "", "Press Space or an arrow key to start")
CONTROLS_TEXT = "Arrows/WASD move   P/Space pause   R restart   Q quit"


def decode_key(key: int | str) -> str | None:
    """Map a curses key code or raw escape sequence to a direction or command name."""
    if isinstance(key, str):
        if key in SEQUENCE_TO_DIRECTION:
            return SEQUENCE_TO_DIRECTION[key]
        if len(key) != 1:
            return None
        key = ord(key)
    return KEY_TO_COMMAND.get(key)


class GameSession:
    """Owns the single live GameState and the host-side start/restart flow."""

    def __init__(self, config: SnakeConfig, size: BoardSize, rng: Rng | None = None) -> None:
        self.config = config
        self.size = size
        self.rng = rng if rng is not None else seeded_rng(config.seed)
        self.has_started = False
        self.state = self._fresh_state()

    def _fresh_state(self) -> GameState:
        """New board of the current size, held paused behind the welcome dialog."""
        options = GameOptions(
            width=self.size.width,
            height=self.size.height,
            initial_length=self.config.initial_length,
        )
        return replace(create_initial_state(options, self.rng), paused=True)

    def handle(self, command: str) -> bool:
        """Apply one decoded input. Returns False when the player quits."""
        if command == QUIT:
            logger.info("Quit with score %d", self.state.score)
            return False
        if command == RESTART:
            self.restart()
        elif command == PAUSE:
            self.start_or_toggle_pause()
        elif command in DIRECTIONS:
            if not self.has_started:
                self._start()
            self.state = queue_direction(self.state, command)
        return True

    def _start(self) -> None:
        self.has_started = True
        self.state = replace(self.state, paused=False)
        logger.info("Game started on a %dx%d board", self.state.width, self.state.height)

    def start_or_toggle_pause(self) -> None:
        if not self.has_started:
            self._start()
        else:
            self.state = toggle_pause(self.state)

    def restart(self) -> None:
        self.has_started = False
        self.state = self._fresh_state()
        logger.info("Game restarted")

    def resize(self, size: BoardSize) -> None:
        """Rebuild the board for new terminal dimensions; the running game is discarded."""
        self.size = size
        self.restart()
        logger.info("Board resized to %dx%d", size.width, size.height)

    def advance(self) -> GameState:
        """Single frame of the game loop."""
        self.state = tick(self.state, self.rng)
        return self.state

    def dialog_lines(self) -> tuple[str, ...] | None:
        """Overlay text for the welcome and game-over screens, or None while playing."""
        if not self.has_started:
            return WELCOME_LINES
        if self.state.game_over:
            headline = "You Win!" if self.state.won else "Game Over"
            return (headline, "", f"Score: {self.state.score}", "Press R to restart")
        return None

    def status_text(self) -> str:
        status = f"score {self.state.score}"
        if self.has_started and self.state.paused:
            status += "   (paused)"
        return status


class TerminalRenderer:
    """Curses presentation layer for GameSession."""
    PAIR_SNAKE = 1
    PAIR_HEAD = 2
    PAIR_FOOD = 3
    PAIR_BORDER = 4
    PAIR_ALERT = 5
    PAIR_HINT = 6

    def __init__(self, stdscr: curses.window) -> None:
        self.stdscr = stdscr
        self.has_colors = curses.has_colors()
        if self.has_colors:
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(self.PAIR_SNAKE, curses.COLOR_BLACK, curses.COLOR_GREEN)
            curses.init_pair(self.PAIR_HEAD, curses.COLOR_BLACK, curses.COLOR_CYAN)
            curses.init_pair(self.PAIR_FOOD, curses.COLOR_BLACK, curses.COLOR_RED)
            curses.init_pair(self.PAIR_BORDER, curses.COLOR_WHITE, -1)
            curses.init_pair(self.PAIR_ALERT, curses.COLOR_YELLOW, -1)
            curses.init_pair(self.PAIR_HINT, curses.COLOR_BLUE, -1)

    def _attr(self, pair: int, extra: int = 0) -> int:
        if not self.has_colors:
            return extra
        return curses.color_pair(pair) | extra

    def _put(self, y: int, x: int, text: str, attr: int = 0) -> None:
        # Writes past the window edge raise; a too-small terminal just clips.
        try:
            self.stdscr.addstr(y, x, text, attr)
        except curses.error:
            pass

    def draw(self, session: GameSession) -> None:
        """Render header, framed board, controls, and the dialog overlay."""
        state = session.state
        size = session.size
        self.stdscr.erase()
        rows, cols = self.stdscr.getmaxyx()

        total_height = HEADER_HEIGHT + size.pixel_height + CONTROLS_HEIGHT
        top = max(0, (rows - total_height) // 2)
        left = max(0, (cols - size.pixel_width) // 2)

        status = session.status_text()
        self._put(top + 1, left + max(0, (size.pixel_width - len(status)) // 2), status, curses.A_BOLD)

        board_top = top + HEADER_HEIGHT
        self._draw_frame(board_top, left, size, state.game_over)
        self._draw_cells(board_top + 1, left + 1, state)

        controls_y = board_top + size.pixel_height + 1
        self._put(
            controls_y,
            max(0, (cols - len(CONTROLS_TEXT)) // 2),
            CONTROLS_TEXT,
            self._attr(self.PAIR_HINT),
        )

        lines = session.dialog_lines()
        if lines is not None:
            self._draw_dialog(lines, rows, cols)

        self.stdscr.refresh()

    def _draw_frame(self, y: int, x: int, size: BoardSize, alert: bool) -> None:
        attr = self._attr(self.PAIR_ALERT if alert else self.PAIR_BORDER)
        inner = size.pixel_width - 2
        self._put(y, x, "+" + "-" * inner + "+", attr)
        for row in range(1, size.pixel_height - 1):
            self._put(y + row, x, "|", attr)
            self._put(y + row, x + inner + 1, "|", attr)
        self._put(y + size.pixel_height - 1, x, "+" + "-" * inner + "+", attr)

    def _draw_cells(self, y: int, x: int, state: GameState) -> None:
        board = encode_board(state)
        pairs = {FOOD: self.PAIR_FOOD, BODY: self.PAIR_SNAKE, HEAD: self.PAIR_HEAD}
        for row_idx, row in enumerate(board):
            for col_idx, code in enumerate(row):
                code = int(code)
                if code not in pairs:
                    continue
                self._put(
                    y + row_idx,
                    x + col_idx * CELL_WIDTH,
                    CELL_GLYPHS[code],
                    self._attr(pairs[code], curses.A_BOLD),
                )

    def _draw_dialog(self, lines: tuple[str, ...], rows: int, cols: int) -> None:
        width = max(len(line) for line in lines) + 4
        height = len(lines) + 2
        top = max(0, (rows - height) // 2)
        left = max(0, (cols - width) // 2)
        attr = self._attr(self.PAIR_ALERT)
        self._put(top, left, "+" + "-" * (width - 2) + "+", attr)
        for offset, line in enumerate(lines, start=1):
            self._put(top + offset, left, "| " + line.center(width - 4) + " |", attr)
        self._put(top + height - 1, left, "+" + "-" * (width - 2) + "+", attr)


def read_key(stdscr: curses.window) -> int | str | None:
    """Read one key, collecting the rest of a raw escape sequence when ESC arrives.

    Returns None for a lone ESC. A sequence comes back as one string, so its
    final byte is never decoded as a WASD letter.
    """
    key = stdscr.getch()
    if key != ESCAPE:
        return key

    # The rest of a sequence is already buffered; do not wait for it.
    stdscr.nodelay(True)
    try:
        second = stdscr.getch()
        if second == -1:
            return None
        sequence = "\x1b" + chr(second)
        if second == ord("["):
            final = stdscr.getch()
            if final != -1:
                sequence += chr(final)
    finally:
        stdscr.nodelay(False)
    return sequence


def _terminal_board_size(stdscr: curses.window) -> BoardSize:
    rows, cols = stdscr.getmaxyx()
    return get_board_size(cols, rows)


def run_game(stdscr: curses.window, config: SnakeConfig, fit_terminal: bool = True) -> int:
    """Drive a session until the player quits. Returns the final score."""
    try:
        curses.curs_set(0)
    except curses.error:
        # Some terminals cannot hide the cursor.
        pass
    stdscr.keypad(True)

    if fit_terminal:
        size = _terminal_board_size(stdscr)
    else:
        size = board_size(config.width, config.height)
    session = GameSession(config, size)
    renderer = TerminalRenderer(stdscr)
    renderer.draw(session)

    interval = config.tick_ms / 1000.0
    next_tick = time.monotonic() + interval

    while True:
        wait_ms = max(0, int((next_tick - time.monotonic()) * 1000))
        stdscr.timeout(wait_ms)
        key = read_key(stdscr)

        if key == curses.KEY_RESIZE:
            if fit_terminal:
                session.resize(_terminal_board_size(stdscr))
            renderer.draw(session)
        elif key is not None and key != -1:
            command = decode_key(key)
            if command is not None:
                if not session.handle(command):
                    break
                renderer.draw(session)

        now = time.monotonic()
        if now >= next_tick:
            session.advance()
            renderer.draw(session)
            next_tick += interval
            if next_tick < now:
                next_tick = now + interval

    return session.state.score


def run_player_tui(config: SnakeConfig, fit_terminal: bool = True) -> int:
    """Launch the curses Snake interface and restore the terminal on exit."""
    return curses.wrapper(run_game, config, fit_terminal)
