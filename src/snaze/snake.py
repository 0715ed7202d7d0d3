"""Snake representation and movement logic."""

from __future__ import annotations

import enum
from collections import deque
from typing import NamedTuple


class Direction(enum.Enum):
    """Cardinal movement directions with (dx, dy) values."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)
    NONE = (0, 0)

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]


# Pairs that would cause an instant 180° reversal.
_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
    Direction.NONE: Direction.NONE,
}

MOVES: tuple[Direction, ...] = (
    Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT,
)


class Position(NamedTuple):
    """A cell coordinate; ``x`` is the column and ``y`` the row."""

    x: int
    y: int

    def step(self, direction: Direction, width: int, height: int) -> Position:
        """Return the neighbouring cell, wrapping around both axes."""
        dx, dy = direction.value
        return Position((self.x + dx) % width, (self.y + dy) % height)


def is_reversal(current: Direction, new: Direction) -> bool:
    """Check whether *new* points straight back along *current*."""
    return current is not Direction.NONE and new is current.opposite


class Snake:
    """A snake represented as an ordered deque of positions.

    The head is ``body[0]``; the tail is ``body[-1]``. The snake lives on a
    torus of ``width`` x ``height`` cells, so every move wraps.
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError("Snake bounds must be at least 1x1.")
        self.width = width
        self.height = height
        self.body: deque[Position] = deque()
        self.direction = Direction.NONE

    def __len__(self) -> int:
        return len(self.body)

    @property
    def head(self) -> Position:
        """Return the head coordinate."""
        return self.body[0]

    @property
    def tail(self) -> Position:
        return self.body[-1]

    def reset(self, start: Position, direction: Direction = Direction.NONE) -> None:
        """Shrink the snake to a single segment at *start*."""
        self.body.clear()
        self.body.append(Position(*start))
        self.direction = direction

    def next_head(self, direction: Direction) -> Position:
        """Compute the head position after a move without moving."""
        return self.head.step(direction, self.width, self.height)

    def advance(self, direction: Direction, grow: bool = False) -> Position:
        """Move the snake one step and return the new head.

        The tail is kept when *grow* is set, so the body gets one longer.
        """
        new_head = self.next_head(direction)
        self.body.appendleft(new_head)
        if not grow:
            self.body.pop()
        self.direction = direction
        return new_head

    def occupies(self, pos: Position) -> bool:
        """Check whether any segment other than the head sits on *pos*."""
        return any(seg == pos for seg in list(self.body)[1:])

    def self_collision(self) -> bool:
        """Check whether the head overlaps any other body segment."""
        return self.occupies(self.head)

    def to_dict(self) -> dict:
        """Serialize snake state to a dictionary."""
        return {
            "body": [list(seg) for seg in self.body],
            "direction": self.direction.name.lower(),
        }
