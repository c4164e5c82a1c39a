"""Utility helpers for walking and classifying files."""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Pattern

LOGGER = logging.getLogger(__name__)


def _permits(include: Pattern[str] | None, exclude: Pattern[str] | None, value: str) -> bool:
    if exclude is not None and exclude.search(value):
        return False
    return include is None or include.search(value) is not None


@dataclass(frozen=True, slots=True)
class FilterSet:
    """Include/exclude patterns for file names, directory names and full paths.

    A missing pattern always permits. Path patterns apply to every entry,
    name patterns only to entries of their kind.
    """

    include_file: Pattern[str] | None = None
    exclude_file: Pattern[str] | None = None
    include_dir: Pattern[str] | None = None
    exclude_dir: Pattern[str] | None = None
    include_path: Pattern[str] | None = None
    exclude_path: Pattern[str] | None = None

    def admits(self, path: str, name: str, is_dir: bool) -> bool:
        if not _permits(self.include_path, self.exclude_path, path):
            return False
        if is_dir:
            return _permits(self.include_dir, self.exclude_dir, name)
        return _permits(self.include_file, self.exclude_file, name)

    def admits_dir(self, path: str) -> bool:
        return self.admits(path, os.path.basename(path), True)

    def admits_file(self, path: str) -> bool:
        return self.admits(path, os.path.basename(path), False)


def iter_source_files(root: Path, filters: FilterSet) -> Iterator[Path]:
    """Yield admitted files under ``root`` in pre-order, pruning rejected directories.

    ``root`` may be a single file. Errors reading the root propagate; errors
    on entries below it are logged and the walk moves on.
    """
    root_str = str(root)
    if not os.path.isdir(root_str):
        if not os.path.exists(root_str):
            raise FileNotFoundError(f"Source not found: {root_str}")
        if filters.admits_file(root_str):
            yield root
        else:
            LOGGER.debug("skip file %s", root_str)
        return

    if not filters.admits_dir(root_str):
        LOGGER.info("skip folder %s", root_str)
        return
    LOGGER.info("index folder %s", root_str)
    # Listing the root must succeed; failures further down are tolerated.
    entries = _list_dir(root_str)
    yield from _walk_entries(entries, filters)


def _list_dir(path: str) -> list[os.DirEntry]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda entry: entry.name)


def _walk_entries(entries: list[os.DirEntry], filters: FilterSet) -> Iterator[Path]:
    # One iterator of pending siblings per open directory, innermost last.
    stack = [iter(entries)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as exc:
            LOGGER.warning("%s: %s", entry.path, exc)
            continue

        if not is_dir:
            if filters.admits(entry.path, entry.name, False):
                yield Path(entry.path)
            else:
                LOGGER.debug("skip file %s", entry.path)
            continue

        if not filters.admits(entry.path, entry.name, True):
            LOGGER.info("skip folder %s", entry.path)
            continue
        LOGGER.info("index folder %s", entry.path)
        try:
            children = _list_dir(entry.path)
        except OSError as exc:
            LOGGER.warning("%s: %s", entry.path, exc)
            continue
        stack.append(iter(children))


def compute_document_id(path: Path | str) -> str:
    """Stable id for a file derived from its absolute path, not its content."""
    return hashlib.md5(str(path).encode("utf-8")).hexdigest()


def file_type_of(path: Path) -> str:
    """Lowercase extension without the leading dot."""
    return path.suffix.lower().lstrip(".")
