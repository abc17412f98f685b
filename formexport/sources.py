"""Source tables: explicit ``path -> loader`` maps for adapter source and patch files."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Dict, Iterable, Mapping, Optional

from .logging import get_logger

Loader = Callable[[], str]
SourceTable = Mapping[str, Loader]

_EXCLUDED_DIRS = {
    ".git",
    "node_modules",
    "dist",
    "__pycache__",
    ".turbo",
    "coverage",
}

logger = get_logger("sources")


def scan_sources(root: Path, patterns: Iterable[str] = ("*",)) -> Dict[str, Loader]:
    """Walk ``root`` and return lazy loaders keyed by POSIX paths relative to it.

    File contents are only read when a loader is called.
    """
    root = root.expanduser().resolve()
    pattern_list = list(patterns)
    table: Dict[str, Loader] = {}
    if not root.is_dir():
        logger.warning("Source directory %s does not exist", root)
        return table

    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in _EXCLUDED_DIRS)
        for filename in sorted(filenames):
            full_path = Path(current) / filename
            rel_path = full_path.relative_to(root).as_posix()
            if not any(fnmatchcase(rel_path, pattern) for pattern in pattern_list):
                continue
            table[rel_path] = _file_loader(full_path)

    logger.debug("Discovered %d source files under %s", len(table), root)
    return table


def static_sources(contents: Mapping[str, str]) -> Dict[str, Loader]:
    """Wrap already-resolved contents so they satisfy the SourceTable contract."""
    return {path: _constant_loader(text) for path, text in contents.items()}


def find_by_suffix(table: SourceTable, suffix: str) -> Optional[str]:
    """Return the first path (in sorted order) whose name ends with ``suffix``."""
    for path in sorted(table):
        if path == suffix or path.endswith(f"/{suffix}"):
            return path
    return None


def _file_loader(path: Path) -> Loader:
    def _load() -> str:
        return path.read_text(encoding="utf-8")

    return _load


def _constant_loader(text: str) -> Loader:
    def _load() -> str:
        return text

    return _load


__all__ = ["Loader", "SourceTable", "find_by_suffix", "scan_sources", "static_sources"]
