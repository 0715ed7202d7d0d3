"""Snaze: snake in a maze, with a pathfinding autoplay agent."""

from snaze.config import Settings
from snaze.grid import CellType, Grid, GridFullError, LevelFormatError, Tile
from snaze.pathfinder import AgentKind, NoMoveError, PathFinder
from snaze.phases import Phase, transition
from snaze.session import Session, View
from snaze.snake import Direction, Position, Snake

__all__ = [
    "AgentKind",
    "CellType",
    "Direction",
    "Grid",
    "GridFullError",
    "LevelFormatError",
    "NoMoveError",
    "PathFinder",
    "Phase",
    "Position",
    "Session",
    "Settings",
    "Snake",
    "Tile",
    "View",
    "transition",
]
