# Core Snake game state and rules, independent from terminal/UI code.
from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import random
from typing import Callable, Literal, NamedTuple


logger = logging.getLogger(__name__)

# Bounds used by the terminal host and CLI when validating input.
MIN_WIDTH = 12
MAX_WIDTH = 36
MIN_HEIGHT = 8
MAX_HEIGHT = 22
MIN_TICK_MS = 40
MAX_TICK_MS = 500
MIN_INITIAL_LENGTH = 2
DEFAULT_INITIAL_LENGTH = 3
DEFAULT_TICK_MS = 140

Direction = Literal["up", "down", "left", "right"]
Rng = Callable[[], float]

DIRECTIONS: tuple[Direction, ...] = ("up", "down", "left", "right")
OPPOSITE_DIRECTION: dict[str, Direction] = {
    "up": "down",
    "down": "up",
    "left": "right",
    "right": "left",
}
DIRECTION_DELTAS: dict[str, tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


class Point(NamedTuple):
    x: int
    y: int


@dataclass
class SnakeConfig:
    """Runtime settings shared between the logic layer and the terminal host."""
    width: int = MIN_WIDTH
    height: int = MIN_HEIGHT
    initial_length: int = DEFAULT_INITIAL_LENGTH
    tick_ms: int = DEFAULT_TICK_MS
    seed: int | None = None


@dataclass(frozen=True)
class GameOptions:
    width: int
    height: int
    initial_length: int = DEFAULT_INITIAL_LENGTH


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of one board. Every transition returns a new value."""
    width: int
    height: int
    snake: tuple[Point, ...]                # ordered body, head at index 0
    direction: Direction                    # heading applied on the last tick
    next_direction: Direction               # queued from input; applied next tick
    food: Point | None                      # None once the board is full
    score: int = 0
    game_over: bool = False
    paused: bool = False
    won: bool = False

    @property
    def head(self) -> Point:
        return self.snake[0]


def create_initial_state(options: GameOptions, rng: Rng = random.random) -> GameState:
    """Place a centered snake facing right and drop the first food.

    Raises ValueError when the board is empty or too narrow for the snake.
    """
    width, height, length = options.width, options.height, options.initial_length
    if width < 1 or height < 1:
        raise ValueError(f"Board must be at least 1x1, got {width}x{height}.")
    if length < 1:
        raise ValueError("initial_length must be at least 1.")

    start_x = width // 2
    start_y = height // 2
    if length > start_x + 1:
        raise ValueError(
            f"initial_length {length} does not fit left of the center on a board {width} wide."
        )

    # Build body extending left from head.
    snake = tuple(Point(start_x - i, start_y) for i in range(length))
    food = place_food(width, height, snake, rng)

    return GameState(
        width=width,
        height=height,
        snake=snake,
        direction="right",
        next_direction="right",
        food=food,
    )


def queue_direction(state: GameState, direction: Direction) -> GameState:
    """Buffer the heading for the next tick; reject instant 180-degree turns."""
    if direction not in OPPOSITE_DIRECTION:
        raise ValueError(f"Unknown direction: {direction!r}")
    # Checked against the committed heading, not the buffered one.
    if is_opposite(state.direction, direction):
        return state
    return replace(state, next_direction=direction)


def toggle_pause(state: GameState) -> GameState:
    if state.game_over:
        return state
    return replace(state, paused=not state.paused)


def tick(state: GameState, rng: Rng = random.random) -> GameState:
    """Advance one step. Collisions and wins are reported through the returned state."""
    if state.game_over or state.paused:
        return state

    direction = state.next_direction
    next_head = move_point(state.head, direction)
    will_eat = state.food is not None and next_head == state.food
    hits_wall = is_out_of_bounds(next_head, state.width, state.height)

    if hits_wall or _hits_self(next_head, state.snake, will_eat):
        logger.debug(
            "Snake hit %s at %s, score %d",
            "wall" if hits_wall else "itself",
            tuple(next_head),
            state.score,
        )
        return replace(state, direction=direction, game_over=True, paused=False)

    food = state.food
    score = state.score
    won = state.won

    if will_eat:
        snake = (next_head,) + state.snake
        score += 1
        food = place_food(state.width, state.height, snake, rng)
        if food is None:
            won = True
            logger.info("Board filled with score %d", score)
    else:
        snake = (next_head,) + state.snake[:-1]

    return replace(
        state,
        snake=snake,
        direction=direction,
        next_direction=direction,
        food=food,
        score=score,
        won=won,
        game_over=True if won else state.game_over,
    )


def place_food(
    width: int,
    height: int,
    snake: tuple[Point, ...] | list[Point],
    rng: Rng,
) -> Point | None:
    """Pick a free cell using rng, or None when the snake covers the board.

    Free cells are enumerated row-major (y outer, x inner); the chosen cell is
    ``free[floor(rng() * len(free))]``, clamped so that ``rng() == 1.0`` still
    lands on the last free cell.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Board must be at least 1x1, got {width}x{height}.")

    occupied = {(x, y) for x, y in snake}
    free = [Point(x, y) for y in range(height) for x in range(width) if (x, y) not in occupied]
    if not free:
        return None

    index = int(rng() * len(free))
    return free[max(0, min(index, len(free) - 1))]


def is_opposite(a: str, b: str) -> bool:
    return OPPOSITE_DIRECTION.get(a) == b


def move_point(point: Point, direction: str) -> Point:
    """Translate a point by one tile in the given direction."""
    dx, dy = DIRECTION_DELTAS[direction]
    return Point(point.x + dx, point.y + dy)


def is_out_of_bounds(point: Point, width: int, height: int) -> bool:
    return point.x < 0 or point.y < 0 or point.x >= width or point.y >= height


def _hits_self(next_head: Point, snake: tuple[Point, ...], will_eat: bool) -> bool:
    # Moving into the current tail is allowed only when not growing
    # (the tail moves away in the same tick).
    body = snake if will_eat else snake[:-1]
    return next_head in body
