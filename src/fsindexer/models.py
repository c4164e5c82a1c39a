"""Core fsindexer data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


def build_chunk_id(document_id: str, ordinal: int) -> str:
    """Return the backend id for the chunk at ``ordinal`` of a document."""
    if ordinal > 0:
        return f"{document_id}_{ordinal}"
    return document_id


@dataclass(frozen=True, slots=True)
class ChunkDocument:
    """Chunk of document text paired with the file it came from."""

    document_id: str
    content: str
    ordinal: int
    source_path: str
    file_name: str
    file_type: str

    @property
    def chunk_id(self) -> str:
        return build_chunk_id(self.document_id, self.ordinal)

    @property
    def is_placeholder(self) -> bool:
        return self.ordinal == 0 and not self.content

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation sent to the backend."""
        return {
            "content": self.content,
            "num": self.ordinal,
            "path": self.source_path,
            "name": self.file_name,
            "type": self.file_type,
        }
