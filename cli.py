# Command-line launcher for the terminal Snake game.
from __future__ import annotations

import argparse
import logging
import logging.handlers
import sys

try:
    from .game_logic import (
        DEFAULT_INITIAL_LENGTH,
        DEFAULT_TICK_MS,
        MAX_HEIGHT,
        MAX_TICK_MS,
        MAX_WIDTH,
        MIN_HEIGHT,
        MIN_INITIAL_LENGTH,
        MIN_TICK_MS,
        MIN_WIDTH,
        SnakeConfig,
    )
    from .utils import parse_int
except ImportError:
    from game_logic import (
        DEFAULT_INITIAL_LENGTH,
        DEFAULT_TICK_MS,
        MAX_HEIGHT,
        MAX_TICK_MS,
        MAX_WIDTH,
        MIN_HEIGHT,
        MIN_INITIAL_LENGTH,
        MIN_TICK_MS,
        MIN_WIDTH,
        SnakeConfig,
    )
    from utils import parse_int


logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
# Upper bound on warnings held back while curses owns the screen.
HELD_RECORDS = 1000


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snake-tui", description="Play Snake in the terminal")
    parser.add_argument("--width", help=f"Board width in cells ({MIN_WIDTH}-{MAX_WIDTH}); fits the terminal by default")
    parser.add_argument("--height", help=f"Board height in cells ({MIN_HEIGHT}-{MAX_HEIGHT}); fits the terminal by default")
    parser.add_argument("--initial-length", default=str(DEFAULT_INITIAL_LENGTH), help="Starting snake length")
    parser.add_argument("--tick-ms", default=str(DEFAULT_TICK_MS), help=f"Milliseconds per step ({MIN_TICK_MS}-{MAX_TICK_MS})")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible food placement")
    parser.add_argument("--log-file", default=None, help="Write log records to this file")
    parser.add_argument("--log-level", default="INFO", choices=LOG_LEVELS, help="Log level for --log-file")
    return parser


def config_from_args(args: argparse.Namespace) -> tuple[SnakeConfig, bool]:
    """Validate CLI values into a SnakeConfig. The flag says whether to fit the terminal."""
    if (args.width is None) != (args.height is None):
        raise ValueError("Pass both --width and --height, or neither.")

    fit_terminal = args.width is None
    width = MIN_WIDTH if fit_terminal else parse_int(args.width, MIN_WIDTH, MAX_WIDTH, "Width")
    height = MIN_HEIGHT if fit_terminal else parse_int(args.height, MIN_HEIGHT, MAX_HEIGHT, "Height")
    # The snake starts centered and extends left, so the narrowest board caps its length.
    initial_length = parse_int(args.initial_length, MIN_INITIAL_LENGTH, width // 2 + 1, "Initial length")
    tick_ms = parse_int(args.tick_ms, MIN_TICK_MS, MAX_TICK_MS, "Tick interval")

    config = SnakeConfig(
        width=width,
        height=height,
        initial_length=initial_length,
        tick_ms=tick_ms,
        seed=args.seed,
    )
    return config, fit_terminal


def configure_logging(log_file: str | None, level: str) -> logging.Handler | None:
    """Send records to log_file, or hold warnings in memory while curses owns the screen.

    Returns the holding handler; flush it with release_held_records once the terminal is restored.
    """
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=getattr(logging, level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        return None

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    held = logging.handlers.MemoryHandler(
        capacity=HELD_RECORDS,
        flushLevel=logging.CRITICAL + 1,
        target=stderr_handler,
        flushOnClose=False,
    )
    held.setLevel(logging.WARNING)
    logging.getLogger().addHandler(held)
    return held


def release_held_records(held: logging.Handler | None) -> None:
    if held is None:
        return
    logging.getLogger().removeHandler(held)
    held.flush()
    held.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config, fit_terminal = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    # Imported late so argument errors do not require a curses-capable platform.
    try:
        from .terminal_ui import run_player_tui
    except ImportError:
        from terminal_ui import run_player_tui

    held = configure_logging(args.log_file, args.log_level)
    try:
        score = run_player_tui(config, fit_terminal=fit_terminal)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    finally:
        release_held_records(held)

    print(f"Final score: {score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
