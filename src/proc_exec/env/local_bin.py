"""Lookup of project-local executable directories."""
from __future__ import annotations

from pathlib import Path

# Checked in order at every level while walking up from the start directory.
LOCAL_BIN_DIRS: tuple[tuple[str, ...], ...] = (
    ("node_modules", ".bin"),
    (".venv", "bin"),
    (".venv", "Scripts"),
    ("venv", "bin"),
    ("venv", "Scripts"),
)


def find_local_bin(directory: str | Path) -> str:
    """Return the nearest local executable directory at or above *directory*.

    Examples of matches are ``<project>/node_modules/.bin`` and
    ``<project>/.venv/bin``.  When no ancestor has one, *directory* itself
    is returned so it can still be added to PATH.
    """
    start = Path(directory).resolve()
    for candidate in (start, *start.parents):
        for parts in LOCAL_BIN_DIRS:
            path = candidate.joinpath(*parts)
            if path.is_dir():
                return str(path)
    return str(start)
