"""Elasticsearch document store."""

from __future__ import annotations

import logging
from typing import Any, Dict

from elasticsearch import ApiError, BadRequestError, Elasticsearch, TransportError

from fsindexer.errors import BackendError, BackendOverloadedError, ConfigurationError

LOGGER = logging.getLogger(__name__)

TOO_MANY_REQUESTS = 429


def _translate(exc: ApiError | TransportError, action: str) -> BackendError:
    status = exc.meta.status if isinstance(exc, ApiError) else None
    message = f"{action} failed: {exc}"
    if status == TOO_MANY_REQUESTS:
        return BackendOverloadedError(message, status=status)
    return BackendError(message, status=status)


class ElasticsearchStore:
    """Persistence layer for chunk documents in a single Elasticsearch index."""

    def __init__(
        self,
        url: str,
        index_name: str,
        *,
        user: str | None = None,
        password: str | None = None,
        client: Elasticsearch | None = None,
    ) -> None:
        self.url = url
        self.index_name = index_name
        if client is None:
            if bool(user) != bool(password):
                raise ConfigurationError("Backend user and password must be given together")
            auth = (user, password) if user else None
            try:
                client = Elasticsearch(url, basic_auth=auth)
            except (ValueError, TransportError) as exc:
                raise BackendError(f"Cannot create client for {url}: {exc}") from exc
        self._client = client

    @property
    def client(self) -> Elasticsearch:
        return self._client

    def close(self) -> None:
        self._client.close()

    def ensure_index(self) -> None:
        """Create the index, treating an existing one as success."""
        try:
            response = self._client.indices.create(index=self.index_name)
        except BadRequestError as exc:
            if exc.error == "resource_already_exists_exception":
                LOGGER.info("index %s exists already", self.index_name)
                return
            raise _translate(exc, f"create index {self.index_name}") from exc
        except (ApiError, TransportError) as exc:
            raise _translate(exc, f"create index {self.index_name}") from exc
        LOGGER.info("index created: %s", response)

    def exists(self, document_id: str) -> bool:
        try:
            return bool(self._client.exists(index=self.index_name, id=document_id))
        except (ApiError, TransportError) as exc:
            raise _translate(exc, f"check document {document_id}") from exc

    def upsert(self, document_id: str, body: Dict[str, Any]) -> None:
        """Write ``body`` under ``document_id``, waiting for one active shard."""
        try:
            self._client.index(
                index=self.index_name,
                id=document_id,
                document=body,
                wait_for_active_shards="1",
            )
        except (ApiError, TransportError) as exc:
            raise _translate(exc, f"index document {document_id}") from exc
