"""Tests for ElasticsearchStore."""

from __future__ import annotations

from unittest.mock import MagicMock, Mock, patch

import pytest
from elasticsearch import ApiError, BadRequestError, NotFoundError

from fsindexer.errors import BackendError, BackendOverloadedError, ConfigurationError
from fsindexer.index.storage import ElasticsearchStore


def _api_error(cls, status: int, error_type: str = "error"):
    body = {"error": {"root_cause": [{"type": error_type, "reason": "reason"}], "type": error_type}, "status": status}
    return cls(error_type, meta=Mock(status=status), body=body)


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def es_store(client) -> ElasticsearchStore:
    return ElasticsearchStore("http://localhost:9200", "fs", client=client)


class TestElasticsearchStore:
    """Test ElasticsearchStore calls and error translation."""

    @patch("fsindexer.index.storage.Elasticsearch")
    def test_init_builds_client_with_auth(self, mock_es: MagicMock) -> None:
        """Should connect with basic auth when a user is given."""
        store = ElasticsearchStore("http://es:9200", "docs", user="elastic", password="secret")

        mock_es.assert_called_once_with("http://es:9200", basic_auth=("elastic", "secret"))
        assert store.client is mock_es.return_value
        assert store.index_name == "docs"

    @patch("fsindexer.index.storage.Elasticsearch")
    def test_init_without_user(self, mock_es: MagicMock) -> None:
        """Should connect anonymously without a user."""
        ElasticsearchStore("http://es:9200", "docs", user=None)

        mock_es.assert_called_once_with("http://es:9200", basic_auth=None)

    @patch("fsindexer.index.storage.Elasticsearch")
    @pytest.mark.parametrize("user,password", [("elastic", None), ("elastic", ""), (None, "secret")])
    def test_init_requires_user_and_password(self, mock_es: MagicMock, user, password) -> None:
        """Should refuse a user without a password and the other way round."""
        with pytest.raises(ConfigurationError):
            ElasticsearchStore("http://es:9200", "docs", user=user, password=password)

        mock_es.assert_not_called()

    @patch("fsindexer.index.storage.Elasticsearch")
    def test_init_bad_url(self, mock_es: MagicMock) -> None:
        """Should raise BackendError when the client cannot be built."""
        mock_es.side_effect = ValueError("bad url")

        with pytest.raises(BackendError):
            ElasticsearchStore("nope", "docs")

    def test_ensure_index_creates(self, es_store, client) -> None:
        es_store.ensure_index()

        client.indices.create.assert_called_once_with(index="fs")

    def test_ensure_index_already_exists(self, es_store, client) -> None:
        """Should treat an existing index as success."""
        client.indices.create.side_effect = _api_error(
            BadRequestError, 400, "resource_already_exists_exception"
        )

        es_store.ensure_index()

    def test_ensure_index_other_error(self, es_store, client) -> None:
        """Should raise on any other failure."""
        client.indices.create.side_effect = _api_error(ApiError, 401, "security_exception")

        with pytest.raises(BackendError) as excinfo:
            es_store.ensure_index()

        assert excinfo.value.status == 401

    def test_exists(self, es_store, client) -> None:
        client.exists.return_value = True
        assert es_store.exists("abc_1") is True
        client.exists.assert_called_once_with(index="fs", id="abc_1")

        client.exists.return_value = False
        assert es_store.exists("abc_1") is False

    def test_exists_error(self, es_store, client) -> None:
        client.exists.side_effect = _api_error(ApiError, 500)

        with pytest.raises(BackendError):
            es_store.exists("abc")

    def test_upsert(self, es_store, client) -> None:
        """Should index the body waiting for one active shard."""
        es_store.upsert("abc_1", {"content": "x"})

        client.index.assert_called_once_with(
            index="fs", id="abc_1", document={"content": "x"}, wait_for_active_shards="1"
        )

    def test_upsert_too_many_requests(self, es_store, client) -> None:
        """Should signal overload for HTTP 429."""
        client.index.side_effect = _api_error(ApiError, 429, "es_rejected_execution_exception")

        with pytest.raises(BackendOverloadedError) as excinfo:
            es_store.upsert("abc_1", {})

        assert excinfo.value.status == 429

    def test_upsert_other_error(self, es_store, client) -> None:
        """Should raise a plain BackendError for other statuses."""
        client.index.side_effect = _api_error(NotFoundError, 404, "index_not_found_exception")

        with pytest.raises(BackendError) as excinfo:
            es_store.upsert("abc_1", {})

        assert not isinstance(excinfo.value, BackendOverloadedError)
        assert excinfo.value.status == 404

    def test_close(self, es_store, client) -> None:
        es_store.close()

        client.close.assert_called_once()
