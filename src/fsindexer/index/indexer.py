"""Document indexing pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from fsindexer.errors import BackendError
from fsindexer.index.publisher import DocumentStore, IndexPublisher
from fsindexer.ingestion.extractor import TextExtractor
from fsindexer.models import ChunkDocument, build_chunk_id
from fsindexer.utils.files import (
    FilterSet,
    compute_document_id,
    file_type_of,
    iter_source_files,
)
from fsindexer.utils.text import chunk_words, normalize_text

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexStats:
    visited: int = 0
    indexed: int = 0
    skipped: int = 0
    placeholders: int = 0
    failed: int = 0
    chunks: int = 0
    failed_chunks: int = 0
    processed_files: list[Path] = field(default_factory=list)

    def increment(self, status: str, path: Path) -> None:
        if status == "indexed":
            self.indexed += 1
        elif status == "skipped":
            self.skipped += 1
        elif status == "placeholder":
            self.placeholders += 1
        elif status == "visited":
            self.visited += 1
        else:
            self.failed += 1
        self.processed_files.append(path)


class Indexer:
    """Coordinates the walk, deduplication, extraction and publishing."""

    def __init__(
        self,
        store: DocumentStore | None,
        filters: FilterSet,
        *,
        chunk_size: int = 3000,
        extractor: TextExtractor | None = None,
        publisher: IndexPublisher | None = None,
    ) -> None:
        self.store = store
        self.filters = filters
        self.chunk_size = chunk_size
        self.extractor = extractor or TextExtractor()
        if publisher is None and store is not None:
            publisher = IndexPublisher(store)
        self.publisher = publisher

    @property
    def chunking_enabled(self) -> bool:
        return self.chunk_size > 1

    def index(self, source: Path, *, dry_run: bool = False) -> IndexStats:
        """Index every admitted file under ``source``.

        With ``dry_run`` the tree is only walked and classified. Returns once
        every publish issued during the walk has completed.
        """
        if not dry_run and (self.store is None or self.publisher is None):
            raise ValueError("A document store is required unless running dry")

        stats = IndexStats()
        for path in iter_source_files(source, self.filters):
            if dry_run:
                LOGGER.info("nop: index %s", path)
                stats.increment("visited", path)
                continue
            try:
                status = self._index_single(path, stats)
            except Exception:
                LOGGER.exception("Failed to process %s", path)
                status = "failed"
            stats.increment(status, path)

        if self.publisher is not None:
            self.publisher.wait()
        return stats

    def is_indexed(self, document_id: str) -> bool:
        """Probe the backend for the chunk that marks a file as already indexed."""
        probe_id = build_chunk_id(document_id, 1 if self.chunking_enabled else 0)
        try:
            return self.store.exists(probe_id)
        except BackendError as exc:
            LOGGER.warning("cannot check %s, indexing anyway: %s", probe_id, exc)
            return False

    def _index_single(self, path: Path, stats: IndexStats) -> str:
        document_id = compute_document_id(path)
        if self.is_indexed(document_id):
            LOGGER.info("%s exists already, skip", path.name)
            return "skipped"

        LOGGER.info("parse %s", path.name)
        content = self.extractor.extract(path)
        if not content:
            # Tombstone so unparsable files are not retried on the next run.
            LOGGER.info("%s, no content, %s", path.name, path)
            if not self._publish(self._document(path, document_id, "", 0), stats):
                return "failed"
            return "placeholder"

        content = normalize_text(content)
        if self.chunking_enabled:
            pieces = enumerate(chunk_words(content, self.chunk_size), start=1)
        else:
            pieces = [(0, content)]

        failures = 0
        for ordinal, piece in pieces:
            if not self._publish(self._document(path, document_id, piece, ordinal), stats):
                failures += 1
        return "failed" if failures else "indexed"

    def _publish(self, document: ChunkDocument, stats: IndexStats) -> bool:
        try:
            self.publisher.publish(document)
        except BackendError:
            stats.failed_chunks += 1
            return False
        stats.chunks += 1
        return True

    @staticmethod
    def _document(path: Path, document_id: str, content: str, ordinal: int) -> ChunkDocument:
        return ChunkDocument(
            document_id=document_id,
            content=content,
            ordinal=ordinal,
            source_path=str(path),
            file_name=path.name,
            file_type=file_type_of(path),
        )
