from unittest.mock import Mock, patch

import pytest

from mychroma.core.exceptions import (
    NotFoundError,
    RemoteError,
    ServerUnavailableError,
    TenantAccessError,
)
from mychroma.core.model import Connection
from mychroma.embedding.base import BaseEmbedding
from mychroma.session import AdminSession, connect, generate_document_id, parse_metadata
from tests.utils.mock_helpers import (
    BASE_URL,
    DB_URL,
    collections_payload,
    make_response,
    sent_payload,
    sent_urls,
)


@pytest.fixture
def mock_request(mocker):
    return mocker.patch("requests.Session.request")


@pytest.fixture
def embedder():
    embedder = Mock(spec=BaseEmbedding)
    embedder.generate_embedding.return_value = [0.1, 0.2, 0.3]
    return embedder


@pytest.fixture
def session(embedder):
    connection = Connection(base_url=BASE_URL)
    with AdminSession(connection, embedder) as session:
        yield session


class TestConnect:
    @patch("mychroma.session.check_health", return_value=True)
    def test_connect_success(self, mock_health, mock_request):
        mock_request.return_value = make_response([{"name": "default_database"}])

        connection = connect("http://chroma.test/", 8000, "default_tenant", api_key="k")

        assert connection.base_url == BASE_URL
        assert connection.api_key == "k"
        assert connection.tenant == "default_tenant"
        mock_health.assert_called_once_with(BASE_URL, timeout=5.0)
        assert sent_urls(mock_request) == [
            f"{BASE_URL}/api/v2/tenants/default_tenant/databases"
        ]

    @patch("mychroma.session.check_health", return_value=False)
    def test_connect_server_down(self, mock_health, mock_request):
        with pytest.raises(ServerUnavailableError, match="not responding"):
            connect("http://chroma.test", 8000, "default_tenant")

        mock_request.assert_not_called()

    @patch("mychroma.session.check_health", return_value=True)
    def test_connect_bad_tenant(self, mock_health, mock_request):
        mock_request.return_value = make_response(
            {"error": "NotFoundError"}, status_code=404
        )

        with pytest.raises(TenantAccessError) as exc_info:
            connect("http://chroma.test", 8000, "nobody")

        assert "Invalid tenant 'nobody'" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RemoteError)


class TestParseMetadata:
    @pytest.mark.parametrize("raw", [None, "", "   ", "{}", "[]", "null", {}])
    def test_empty_metadata_is_none(self, raw):
        assert parse_metadata(raw) is None

    def test_json_object(self):
        assert parse_metadata('{"source": "faq", "page": 3}') == {
            "source": "faq",
            "page": 3,
        }

    def test_mapping_passthrough(self):
        assert parse_metadata({"a": 1}) == {"a": 1}

    @pytest.mark.parametrize("raw", ["{broken", "[1, 2]", '"text"', "42"])
    def test_invalid_metadata(self, raw):
        with pytest.raises(ValueError, match="Invalid JSON in metadata."):
            parse_metadata(raw)


def test_generate_document_id():
    doc_id = generate_document_id()

    assert doc_id.startswith("doc-")
    assert len(doc_id) == 17
    assert doc_id != generate_document_id()


class TestSessionClients:
    def test_client_per_database(self, session):
        default = session.client()
        other = session.client("other")

        assert default.database == "default_database"
        assert other.database == "other"
        assert session.client("other") is other
        assert session.client() is default

    def test_disconnect_drops_clients(self, session):
        first = session.client()
        session.disconnect()

        assert session.client() is not first


class TestDatabaseActions:
    def test_list_databases_uses_connection_tenant(self, session, mock_request):
        mock_request.return_value = make_response([{"name": "a"}, {"name": "b"}])

        assert [d.name for d in session.list_databases()] == ["a", "b"]

    def test_delete_database_drops_its_client(self, session, mock_request):
        mock_request.return_value = make_response(None)
        client = session.client("docs")

        session.delete_database("docs")

        assert session.client("docs") is not client


class TestCollectionActions:
    def test_list_collections_with_counts(self, session, mock_request):
        mock_request.side_effect = [
            make_response(collections_payload("a", "b")),
            make_response(3),
            make_response(text="boom", status_code=500),
        ]

        summaries = session.list_collections()

        assert [(s.name, s.id, s.document_count) for s in summaries] == [
            ("a", "id-a", 3),
            ("b", "id-b", None),
        ]
        assert sent_urls(mock_request) == [
            f"{DB_URL}/collections",
            f"{DB_URL}/collections/id-a/count",
            f"{DB_URL}/collections/id-b/count",
        ]

    def test_create_collection_parses_metadata(self, session, mock_request):
        mock_request.return_value = make_response({"name": "x", "id": "id-x"})

        session.create_collection("x", '{"owner": "ops"}')

        assert sent_payload(mock_request) == {"name": "x", "metadata": {"owner": "ops"}}

    def test_delete_collection(self, session, mock_request):
        mock_request.side_effect = [
            make_response(collections_payload("x")),
            make_response(None),
        ]

        session.delete_collection("x")

        assert mock_request.call_args_list[1].args == ("DELETE", f"{DB_URL}/collections/x")


class TestBrowse:
    def test_second_page(self, session, mock_request):
        session.client().collection_ids.set("notes", "c1")
        mock_request.side_effect = [
            make_response(120),
            make_response(
                {"ids": ["d51"], "documents": ["text"], "metadatas": [{"n": 51}]}
            ),
        ]

        page = session.browse_collection("notes", page=2, page_size=50)

        assert page.total_count == 120
        assert page.total_pages == 3
        assert page.has_previous and page.has_next
        assert page.page_window() == [1, 2, 3]
        assert page.documents[0].id == "d51"
        assert sent_payload(mock_request) == {"limit": 50, "offset": 50}

    def test_first_page_sends_no_offset(self, session, mock_request):
        session.client().collection_ids.set("notes", "c1")
        mock_request.side_effect = [
            make_response(0),
            make_response({"ids": [], "documents": [], "metadatas": []}),
        ]

        page = session.browse_collection("notes", page=0)

        assert page.page == 1
        assert page.total_pages == 0
        assert page.documents == []
        assert sent_payload(mock_request) == {"limit": 50}


class TestDocumentActions:
    @pytest.fixture(autouse=True)
    def cached_collection(self, session):
        session.client().collection_ids.set("notes", "c1")

    def test_add_document_generates_id(self, session, embedder, mock_request):
        mock_request.return_value = make_response(True)

        doc_id = session.add_document("notes", "hello", '{"source": "cli"}')

        assert doc_id.startswith("doc-")
        embedder.generate_embedding.assert_called_once_with("hello")
        assert sent_payload(mock_request) == {
            "documents": ["hello"],
            "embeddings": [[0.1, 0.2, 0.3]],
            "metadatas": [{"source": "cli"}],
            "ids": [doc_id],
        }

    def test_add_document_with_id(self, session, mock_request):
        mock_request.return_value = make_response(True)

        assert session.add_document("notes", "hello", doc_id=" my-id ") == "my-id"
        assert sent_payload(mock_request)["metadatas"] == [None]

    def test_add_document_invalid_metadata_skips_remote_calls(
        self, session, embedder, mock_request
    ):
        with pytest.raises(ValueError):
            session.add_document("notes", "hello", "{oops")

        embedder.generate_embedding.assert_not_called()
        mock_request.assert_not_called()

    def test_edit_document_re_embeds(self, session, embedder, mock_request):
        mock_request.return_value = make_response(True)

        session.edit_document("notes", "doc-1", "updated", {"v": 2})

        embedder.generate_embedding.assert_called_once_with("updated")
        assert sent_urls(mock_request) == [f"{DB_URL}/collections/c1/update"]
        assert sent_payload(mock_request)["ids"] == ["doc-1"]

    def test_edit_document_with_null_metadata(self, session, mock_request):
        """Metadata shown as ``null`` can be passed back unchanged."""
        mock_request.return_value = make_response(True)

        session.edit_document("notes", "doc-1", "updated", "null")

        assert sent_payload(mock_request)["metadatas"] == [None]

    def test_get_document(self, session, mock_request):
        mock_request.return_value = make_response(
            {"ids": ["doc-1"], "documents": ["hello"], "metadatas": [None]}
        )

        record = session.get_document("notes", "doc-1")

        assert record.document == "hello"
        assert sent_payload(mock_request) == {"limit": 1, "ids": ["doc-1"]}

    def test_get_missing_document(self, session, mock_request):
        mock_request.return_value = make_response({"ids": []})

        with pytest.raises(NotFoundError, match="Document not found: doc-9"):
            session.get_document("notes", "doc-9")

    def test_delete_document(self, session, mock_request):
        mock_request.return_value = make_response(None)

        session.delete_document("notes", "doc-1")

        assert sent_payload(mock_request) == {"ids": ["doc-1"]}

    def test_semantic_search(self, session, embedder, mock_request):
        mock_request.return_value = make_response(
            {
                "ids": [["a", "b"]],
                "documents": [["A", "B"]],
                "metadatas": [[None, None]],
                "distances": [[0.25, 0.5]],
            }
        )

        results = session.semantic_search("notes", "what is a tenant", n_results=2)

        embedder.generate_embedding.assert_called_once_with("what is a tenant")
        assert results.query == "what is a tenant"
        assert [row.id for row in results.rows] == ["a", "b"]
        assert [row.similarity for row in results.rows] == [75.0, 50.0]
        assert sent_payload(mock_request) == {
            "query_embeddings": [[0.1, 0.2, 0.3]],
            "n_results": 2,
        }

    def test_embedding_failure_propagates(self, session, embedder, mock_request):
        embedder.generate_embedding.side_effect = RemoteError("bad request")

        with pytest.raises(RemoteError, match="bad request"):
            session.semantic_search("notes", "query")

        mock_request.assert_not_called()
