"""Shared fakes for driving a session without a terminal."""

from collections import deque

import pytest


class ScriptedInput:
    """Feeds pre-recorded answers to a session.

    ``lines`` serve blocking line reads, ``keys`` serve both blocking key
    reads and polls; a poll on an empty key queue reports no keystroke.
    """

    def __init__(self, lines=(), keys=()):
        self.lines = deque(lines)
        self.keys = deque(keys)

    def read_blocking_line(self):
        if not self.lines:
            raise EOFError("script exhausted")
        return self.lines.popleft()

    def poll_keystroke(self):
        return self.keys.popleft() if self.keys else None

    def read_single_blocking_key(self):
        if not self.keys:
            raise EOFError("script exhausted")
        return self.keys.popleft()


class RecordingPresenter:
    def __init__(self):
        self.views = []

    def present(self, view):
        self.views.append(view)


@pytest.fixture
def scripted():
    return ScriptedInput


@pytest.fixture
def write_level(tmp_path):
    """Write level text to a file and return its path as a string."""
    counter = iter(range(1000))

    def _write(text, name=None):
        path = tmp_path / f"{name or f'level{next(counter)}'}.dat"
        path.write_text(text)
        return str(path)

    return _write
