"""Maze grid loaded from level files."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from snaze.snake import Direction, Position

if TYPE_CHECKING:
    from snaze.snake import Snake

logger = logging.getLogger(__name__)


class LevelFormatError(ValueError):
    """Raised when a level description cannot be turned into a grid."""


class GridFullError(RuntimeError):
    """Raised when there is no free cell left to place food on."""


class CellType(enum.IntEnum):
    """Integer codes stored in the grid array."""

    FREE = 0
    WALL = 1
    INVISIBLE_WALL = 2
    SPAWN = 3
    FOOD = 4

    @property
    def blocks(self) -> bool:
        return self in (CellType.WALL, CellType.INVISIBLE_WALL)


class Tile(enum.IntEnum):
    """What a cell looks like once the snake is drawn over the maze."""

    EMPTY = 0
    WALL = 1
    SPAWN = 2
    FOOD = 3
    SNAKE_BODY = 4
    SNAKE_HEAD = 5
    PATH = 6


# Level file characters. Anything not listed here is free space.
_SYMBOLS: dict[str, CellType] = {
    " ": CellType.FREE,
    "#": CellType.WALL,
    ".": CellType.INVISIBLE_WALL,
    "&": CellType.SPAWN,
}

_TILES: dict[CellType, Tile] = {
    CellType.FREE: Tile.EMPTY,
    CellType.WALL: Tile.WALL,
    CellType.INVISIBLE_WALL: Tile.EMPTY,
    CellType.SPAWN: Tile.SPAWN,
    CellType.FOOD: Tile.FOOD,
}


def _read_header(line: str) -> tuple[int, int]:
    parts = line.split()
    if len(parts) < 2:
        raise LevelFormatError(f"Expected 'height width' header, got {line!r}.")
    try:
        height, width = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise LevelFormatError(
            f"Level header must hold two integers, got {line!r}.",
        ) from exc
    if height < 1 or width < 1:
        raise LevelFormatError("Level dimensions must be positive.")
    return height, width


class Grid:
    """NumPy-backed maze with a spawn point and a single food cell.

    The grid is a torus: :meth:`step` wraps coordinates on both axes.
    ``free_cells`` always holds exactly the positions whose cell is
    :attr:`CellType.FREE`, which keeps food placement O(1).
    Cells are indexed ``cells[y, x]``.
    """

    def __init__(self, cells: np.ndarray, name: str = "") -> None:
        if cells.ndim != 2 or cells.size == 0:
            raise LevelFormatError("A grid needs a non-empty 2D cell matrix.")
        self.cells = cells.astype(np.int8, copy=True)
        self.height, self.width = self.cells.shape
        self.name = name

        spawns = np.argwhere(self.cells == CellType.SPAWN)
        if len(spawns) != 1:
            raise LevelFormatError(
                f"Level must contain exactly one spawn '&', found {len(spawns)}.",
            )
        row, col = spawns[0].tolist()
        self.spawn = Position(col, row)
        self.food: Position | None = None

        rows, cols = np.where(self.cells == CellType.FREE)
        self.free_cells: list[Position] = [
            Position(c, r) for r, c in zip(rows.tolist(), cols.tolist(), strict=True)
        ]
        self._free_index: dict[Position, int] = {
            pos: i for i, pos in enumerate(self.free_cells)
        }

    @classmethod
    def from_text(cls, text: str, name: str = "") -> Grid:
        """Parse a level description.

        The first line holds ``height width``; the following lines hold the
        maze rows. Short rows and missing rows are padded with free space.
        """
        lines = text.splitlines()
        if not lines:
            raise LevelFormatError("Level is empty.")
        height, width = _read_header(lines[0])
        rows = [line.rstrip("\r") for line in lines[1:]]
        # Trailing blank lines are padding, not maze rows.
        while len(rows) > height and not rows[-1].strip():
            rows.pop()
        if len(rows) > height:
            raise LevelFormatError(
                f"Level declares {height} rows but has {len(rows)}.",
            )

        cells = np.full((height, width), CellType.FREE, dtype=np.int8)
        for y, row in enumerate(rows):
            if len(row) > width:
                raise LevelFormatError(
                    f"Row {y} is {len(row)} wide, level width is {width}.",
                )
            for x, char in enumerate(row):
                cells[y, x] = _SYMBOLS.get(char, CellType.FREE)
        return cls(cells, name=name)

    @classmethod
    def load(cls, path: str | Path) -> Grid:
        """Read and parse a level file."""
        p = Path(path)
        grid = cls.from_text(p.read_text(), name=p.stem)
        logger.info("Loaded level %s (%dx%d)", p, grid.height, grid.width)
        return grid

    def in_bounds(self, pos: Position) -> bool:
        """Check whether a coordinate lies within the grid."""
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def step(self, pos: Position, direction: Direction) -> Position:
        """Return the cell reached from *pos* moving *direction*."""
        return pos.step(direction, self.width, self.height)

    def get(self, pos: Position) -> CellType:
        """Return the cell type at the given coordinate."""
        return CellType(int(self.cells[pos.y, pos.x]))

    def is_blocked(self, pos: Position, direction: Direction) -> bool:
        """Check whether moving from *pos* towards *direction* hits a wall."""
        target = self.step(pos, direction)
        return self.in_bounds(target) and self.get(target).blocks

    def found_food(self, pos: Position) -> bool:
        return self.food is not None and pos == self.food

    def respawn_food(
        self,
        rng: np.random.Generator,
        avoid: Iterable[Position] = (),
    ) -> Position:
        """Move the food to a random free cell and return its position.

        Cells in *avoid* are skipped while any other free cell remains.
        """
        if self.food is not None:
            self.cells[self.food.y, self.food.x] = CellType.FREE
            self._add_free(self.food)
            self.food = None

        if not self.free_cells:
            raise GridFullError("No free cells left to place food on.")

        blocked = set(avoid)
        if blocked:
            candidates = [
                i for i, pos in enumerate(self.free_cells) if pos not in blocked
            ]
            if not candidates:
                logger.warning("Every free cell is avoided; placing food anyway.")
                candidates = list(range(len(self.free_cells)))
            index = candidates[int(rng.integers(len(candidates)))]
        else:
            index = int(rng.integers(len(self.free_cells)))

        pos = self._remove_free(index)
        self.cells[pos.y, pos.x] = CellType.FOOD
        self.food = pos
        return pos

    def snapshot(
        self,
        snake: Snake | None = None,
        route: Iterable[Position] = (),
    ) -> np.ndarray:
        """Return a matrix of :class:`Tile` codes for rendering.

        Cells of *route* that look empty are drawn as :attr:`Tile.PATH`;
        the snake is drawn over everything else.
        """
        lookup = np.array([_TILES[c] for c in CellType], dtype=np.int8)
        tiles = lookup[self.cells]
        for pos in route:
            if tiles[pos.y, pos.x] in (Tile.EMPTY, Tile.SPAWN):
                tiles[pos.y, pos.x] = Tile.PATH
        if snake is not None and len(snake):
            for seg in snake.body:
                tiles[seg.y, seg.x] = Tile.SNAKE_BODY
            tiles[snake.head.y, snake.head.x] = Tile.SNAKE_HEAD
        return tiles

    def to_dict(self) -> dict:
        """Serialize grid state to a dictionary."""
        return {
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "spawn": list(self.spawn),
            "food": list(self.food) if self.food is not None else None,
            "free_cells": len(self.free_cells),
        }

    def _add_free(self, pos: Position) -> None:
        self._free_index[pos] = len(self.free_cells)
        self.free_cells.append(pos)

    def _remove_free(self, index: int) -> Position:
        # Swap with the last entry so removal stays O(1).
        pos = self.free_cells[index]
        last = self.free_cells.pop()
        del self._free_index[pos]
        if last != pos:
            self.free_cells[index] = last
            self._free_index[last] = index
        return pos
