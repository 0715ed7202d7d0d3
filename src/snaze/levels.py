"""Level directory discovery."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def list_levels(directory: str | Path) -> list[str]:
    """Return the regular files in *directory*, sorted by name."""
    path = Path(directory)
    if not path.is_dir():
        raise NotADirectoryError(f"{path} is not a directory.")
    levels = sorted(str(p) for p in path.iterdir() if p.is_file())
    logger.info("Found %d level file(s) in %s", len(levels), path)
    return levels
