"""Terminal keyboard input and rich-based screen painting."""

from __future__ import annotations

import os
import select
import sys
import termios
import tty
from typing import TextIO

import numpy as np
from rich.console import Console, Group
from rich.rule import Rule
from rich.text import Text

from snaze.grid import Tile
from snaze.session import Status, View
from snaze.snake import Direction

# (glyph, style) per tile; the head glyph depends on the heading.
_GLYPHS: dict[Tile, tuple[str, str]] = {
    Tile.EMPTY: (" ", ""),
    Tile.WALL: ("█", "green"),
    Tile.SPAWN: ("꩜", "yellow"),
    Tile.FOOD: ("◉", "magenta"),
    Tile.SNAKE_BODY: ("█", "yellow"),
    Tile.PATH: ("·", "cyan"),
}


class TerminalInput:
    """Reads lines and single keystrokes from a POSIX terminal.

    Everything is read straight from the file descriptor, never through
    the buffered text stream. Key reads switch the terminal to cbreak mode
    (no echo, no line buffering) and keep it there across polls, so keys
    pressed between frames are not echoed. The next line read restores the
    saved attributes first. Use the object as a context manager, or call
    :meth:`close`, to make sure the terminal is left cooked.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdin
        self.fd = self.stream.fileno()
        self._saved: list | None = None

    def __enter__(self) -> TerminalInput:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Restore the terminal attributes saved by the first key read."""
        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def read_blocking_line(self) -> str:
        self.close()
        data = bytearray()
        while not data.endswith(b"\n"):
            chunk = os.read(self.fd, 1)
            if not chunk:
                if not data:
                    raise EOFError("Input stream closed.")
                break
            data += chunk
        return data.decode(errors="ignore").rstrip("\r\n")

    def poll_keystroke(self) -> str | None:
        """Return a pending key without waiting, or None."""
        self._hold_cbreak()
        ready, _, _ = select.select([self.fd], [], [], 0)
        if not ready:
            return None
        return self._read_key()

    def read_single_blocking_key(self) -> str:
        self._hold_cbreak()
        return self._read_key()

    def _hold_cbreak(self) -> None:
        # Pipes and files have no terminal attributes to change.
        if self._saved is None and os.isatty(self.fd):
            self._saved = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)

    def _read_key(self) -> str:
        data = os.read(self.fd, 1)
        if not data:
            raise EOFError("Input stream closed.")
        return data.decode(errors="ignore")


def render_board(board: np.ndarray, heading: Direction = Direction.NONE) -> Text:
    """Turn a tile matrix into coloured text, one line per row."""
    vertical = heading in (Direction.UP, Direction.DOWN)
    head = ("ⸯ" if vertical else "~", "bold red")
    text = Text()
    for row in board:
        for code in row:
            tile = Tile(int(code))
            glyph, style = head if tile is Tile.SNAKE_HEAD else _GLYPHS[tile]
            text.append(glyph, style=style or None)
        text.append("\n")
    return text


def render_status(status: Status) -> Text:
    lost = status.max_lives - status.lives
    text = Text("Lives:")
    text.append(" ♥" * status.lives, style="red")
    text.append(" ☠" * lost, style="dim")
    text.append(
        f" | Score: {status.score} | Food eaten {status.eaten} of {status.food_target}",
    )
    return text


class RichPresenter:
    """Clears the terminal and paints each view with rich."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else Console(highlight=False)

    def render(self, view: View) -> Group:
        parts = []
        if view.title:
            parts.append(Rule(f"[ {view.title} ]", style="bold"))
        if view.status is not None:
            parts.append(render_status(view.status))
            parts.append(Rule(style="dim"))
        if view.board is not None:
            parts.append(render_board(view.board, view.heading))
        if view.body:
            parts.append(Text(view.body))
        if view.system_message:
            parts.append(Text(f"[ERROR: {view.system_message}]", style="bold red"))
        return Group(*parts)

    def present(self, view: View) -> None:
        self.console.clear()
        self.console.print(self.render(view))
        if view.prompt:
            self.console.print(Text(f"{view.prompt} > "), end="")
