# Shared helpers: board encoding, text rendering, terminal sizing, and rng sources.
from __future__ import annotations

from dataclasses import dataclass
import random

import numpy as np

try:
    from .game_logic import MAX_HEIGHT, MAX_WIDTH, MIN_HEIGHT, MIN_WIDTH, GameState, Rng
except ImportError:
    from game_logic import MAX_HEIGHT, MAX_WIDTH, MIN_HEIGHT, MIN_WIDTH, GameState, Rng


# Cell codes produced by encode_board.
EMPTY = 0
FOOD = 1
BODY = 2
HEAD = 3

CELL_GLYPHS = {
    EMPTY: "  ",
    FOOD: "()",
    BODY: "[]",
    HEAD: "@@",
}

# Terminal layout, in character cells.
CELL_WIDTH = 2
CELL_HEIGHT = 1
HEADER_HEIGHT = 3
CONTROLS_HEIGHT = 3
APP_GAP = 0
ROOT_PADDING = 1


@dataclass(frozen=True)
class BoardSize:
    width: int
    height: int
    pixel_width: int    # framed board width in terminal columns
    pixel_height: int   # framed board height in terminal rows


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def parse_int(raw: str, low: int, high: int, label: str) -> int:
    """Parse and range-check an integer setting with a clear error message."""
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{label} must be an integer.")
    if not (low <= value <= high):
        raise ValueError(f"{label} must be between {low} and {high}.")
    return value


def get_board_size(terminal_width: int, terminal_height: int) -> BoardSize:
    """Fit the board to the terminal, leaving room for the header and controls."""
    available_width = terminal_width - ROOT_PADDING * 2 - 2
    available_height = (
        terminal_height
        - ROOT_PADDING * 2
        - HEADER_HEIGHT
        - CONTROLS_HEIGHT
        - APP_GAP * 2
        - 2
    )

    width = clamp(available_width // CELL_WIDTH, MIN_WIDTH, MAX_WIDTH)
    height = clamp(available_height // CELL_HEIGHT, MIN_HEIGHT, MAX_HEIGHT)
    return board_size(width, height)


def board_size(width: int, height: int) -> BoardSize:
    """Board of fixed cell dimensions plus its framed size on screen."""
    return BoardSize(
        width=width,
        height=height,
        pixel_width=width * CELL_WIDTH + 2,
        pixel_height=height * CELL_HEIGHT + 2,
    )


def encode_board(state: GameState) -> np.ndarray:
    """
    Board grid indexed [y, x]:
    - 0: empty
    - 1: food
    - 2: snake body
    - 3: snake head
    """
    board = np.full((state.height, state.width), EMPTY, dtype=np.int8)

    if state.food is not None:
        board[state.food.y, state.food.x] = FOOD

    for idx, (x, y) in enumerate(state.snake):
        board[y, x] = HEAD if idx == 0 else BODY

    return board


def render_rows(state: GameState) -> list[str]:
    """Plain-text rows of the board, two characters per cell, no frame."""
    board = encode_board(state)
    return ["".join(CELL_GLYPHS[int(code)] for code in row) for row in board]


def seeded_rng(seed: int | None) -> Rng:
    """Return a zero-argument float source; reproducible when seed is given."""
    return random.Random(seed).random
