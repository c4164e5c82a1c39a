"""Shared fixtures."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from fsindexer.errors import BackendError, BackendOverloadedError


class FakeStore:
    """In-memory document store recording every call."""

    def __init__(self) -> None:
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.exists_calls: List[str] = []
        self.upsert_calls: List[str] = []
        self.overloads: int = 0
        self.fail_ids: set[str] = set()

    def exists(self, document_id: str) -> bool:
        self.exists_calls.append(document_id)
        return document_id in self.documents

    def upsert(self, document_id: str, body: Dict[str, Any]) -> None:
        self.upsert_calls.append(document_id)
        if self.overloads:
            self.overloads -= 1
            raise BackendOverloadedError("429 Too Many Requests", status=429)
        if document_id in self.fail_ids:
            raise BackendError("400 Bad Request", status=400)
        self.documents[document_id] = body


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
