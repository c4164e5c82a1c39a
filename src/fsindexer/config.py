"""Application configuration defaults."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Pattern

from fsindexer.errors import ConfigurationError
from fsindexer.utils.files import FilterSet

DEFAULT_INCLUDE_FILE = r".*\.(docx|pdf|htm|html)$"
DEFAULT_EXCLUDE_DIR = r"^(\.|~|sdk)"
DEFAULT_ES_URL = "http://localhost:9200"
DEFAULT_ES_USER = "elastic"
DEFAULT_ES_PASSWORD = "changeme"
DEFAULT_INDEX = "fs"
DEFAULT_CHUNK_SIZE = 3000


def _compile(name: str, pattern: str | None) -> Pattern[str] | None:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(
            f"Invalid {name} pattern {pattern!r}: {exc}", {"option": name}
        ) from exc


@dataclass(slots=True)
class IndexerConfig:
    source: Path
    include_file: str | None = DEFAULT_INCLUDE_FILE
    exclude_file: str | None = None
    include_dir: str | None = None
    exclude_dir: str | None = DEFAULT_EXCLUDE_DIR
    include_path: str | None = None
    exclude_path: str | None = None
    es_url: str = DEFAULT_ES_URL
    es_user: str | None = DEFAULT_ES_USER
    es_password: str | None = DEFAULT_ES_PASSWORD
    index_name: str = DEFAULT_INDEX
    chunk_size: int = DEFAULT_CHUNK_SIZE
    dry_run: bool = False

    def __post_init__(self) -> None:
        # Document ids hash the path, so every walked path has to be absolute.
        self.source = Path(os.path.abspath(self.source))

    @property
    def chunking_enabled(self) -> bool:
        return self.chunk_size > 1

    def build_filters(self) -> FilterSet:
        """Compile the configured patterns into a FilterSet."""
        return FilterSet(
            include_file=_compile("include-file", self.include_file),
            exclude_file=_compile("exclude-file", self.exclude_file),
            include_dir=_compile("include-dir", self.include_dir),
            exclude_dir=_compile("exclude-dir", self.exclude_dir),
            include_path=_compile("include-path", self.include_path),
            exclude_path=_compile("exclude-path", self.exclude_path),
        )
