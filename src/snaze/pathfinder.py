"""Autoplay agents: breadth-first search to the food with a greedy fallback."""

from __future__ import annotations

import enum
import logging
from collections import deque
from typing import TYPE_CHECKING

import numpy as np

from snaze.snake import MOVES, Direction, Position, is_reversal

if TYPE_CHECKING:
    from snaze.grid import Grid
    from snaze.snake import Snake

logger = logging.getLogger(__name__)


class NoMoveError(RuntimeError):
    """Raised when the snake is boxed in with no legal move at all."""


class AgentKind(enum.Enum):
    """Autoplay strategies."""

    SMART = "smart"
    DUMB = "dumb"


class PathFinder:
    """Plans snake moves towards the food.

    The search never copies the snake body. Frontier nodes carry only a
    head position and its depth, and every visited position remembers its
    parent. The cells the hypothetical body covers at a node are rebuilt
    from that parent chain plus the real body, the same way
    :meth:`Snake.advance` grows the head and retracts the tail.
    """

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()

    def plan(self, grid: Grid, snake: Snake, kind: AgentKind) -> deque[Direction]:
        """Return the next moves for *kind*; never empty."""
        if kind is AgentKind.SMART:
            path = self.solve(grid, snake)
            if path:
                logger.debug("BFS plan of %d moves to %s", len(path), grid.food)
                return deque(path)
            if path is None:
                logger.warning(
                    "No route from %s to food at %s; moving greedily.",
                    snake.head, grid.food,
                )
        return deque([self.greedy_step(grid, snake)])

    def solve(self, grid: Grid, snake: Snake) -> list[Direction] | None:
        """Find a shortest move sequence from the head to the food.

        Returns ``None`` when no route exists.
        """
        if grid.food is None:
            return None
        start = snake.head
        if grid.found_food(start):
            return []

        body = list(snake.body)
        # position -> (parent, direction taken into it)
        came_from: dict[Position, tuple[Position | None, Direction]] = {
            start: (None, Direction.NONE),
        }
        frontier: deque[tuple[Position, int]] = deque([(start, 0)])

        while frontier:
            current, depth = frontier.popleft()
            occupied = self._occupied_after_move(current, depth, came_from, body)
            for direction in MOVES:
                nxt = grid.step(current, direction)
                if nxt in came_from:
                    continue
                if grid.get(nxt).blocks or nxt in occupied:
                    continue
                came_from[nxt] = (current, direction)
                if grid.found_food(nxt):
                    return self._reconstruct(came_from, nxt)
                frontier.append((nxt, depth + 1))
        return None

    def greedy_step(self, grid: Grid, snake: Snake) -> Direction:
        """Pick a single safe move, preferring one that eats the food.

        Raises :class:`NoMoveError` when every direction is blocked.
        """
        occupied = set(list(snake.body)[:-1])
        legal = [
            d for d in MOVES
            if not grid.is_blocked(snake.head, d)
            and grid.step(snake.head, d) not in occupied
        ]
        if not legal:
            raise NoMoveError(f"Snake at {snake.head} has nowhere to move.")

        forward = [d for d in legal if not is_reversal(snake.direction, d)]
        # A single-segment snake may still turn back on itself.
        options = forward or legal
        for d in options:
            if grid.found_food(grid.step(snake.head, d)):
                return d
        return options[int(self.rng.integers(len(options)))]

    @staticmethod
    def _occupied_after_move(
        node: Position,
        depth: int,
        came_from: dict[Position, tuple[Position | None, Direction]],
        body: list[Position],
    ) -> set[Position]:
        """Cells the simulated body still covers after leaving *node*.

        At depth ``d`` the body is the ``d`` most recent heads followed by
        the real body, cut to the real length. Moving on frees the last
        cell, so only the first ``len(body) - 1`` cells stay occupied.
        """
        keep = len(body) - 1
        occupied: set[Position] = set()
        pos: Position | None = node
        for _ in range(min(depth + 1, keep)):
            occupied.add(pos)
            pos = came_from[pos][0]
        # Whatever the recent heads do not cover is still real body.
        occupied.update(body[1:keep - depth])
        return occupied

    @staticmethod
    def _reconstruct(
        came_from: dict[Position, tuple[Position | None, Direction]],
        end: Position,
    ) -> list[Direction]:
        path: list[Direction] = []
        pos = end
        parent, direction = came_from[pos]
        while parent is not None:
            path.append(direction)
            pos = parent
            parent, direction = came_from[pos]
        path.reverse()
        return path
