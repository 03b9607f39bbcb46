"""Admin session: a held Chroma connection plus the operator actions.

An ``AdminSession`` is created by ``connect`` and owns one ``ChromaClient``
per database it touches, so each database's collection-id cache lives as
long as the session.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import DEFAULT_PAGE_SIZE
from .core.exceptions import (
    MyChromaError,
    NotFoundError,
    ServerUnavailableError,
    TenantAccessError,
)
from .core.model import DEFAULT_DATABASE, Connection
from .core.schemas import (
    CollectionSummary,
    DatabaseInfo,
    DocumentPage,
    DocumentRecord,
    SearchResults,
)
from .embedding.base import BaseEmbedding
from .vector_store.client import ChromaClient
from .vector_store.health import DEFAULT_HEALTH_TIMEOUT, check_health

logger = logging.getLogger(__name__)

MetadataInput = Union[None, str, Mapping[str, Any]]


def connect(
    host: str,
    port: Union[int, str],
    tenant: str,
    api_key: Optional[str] = None,
    database: str = DEFAULT_DATABASE,
    health_timeout: float = DEFAULT_HEALTH_TIMEOUT,
) -> Connection:
    """
    Check the server and tenant, then return the connection to hold.

    Raises:
        ServerUnavailableError: If the health check fails
        TenantAccessError: If the tenant's databases cannot be listed
    """
    connection = Connection.from_host_port(
        host, port, tenant=tenant, api_key=api_key, database=database
    )

    if not check_health(connection.base_url, timeout=health_timeout):
        raise ServerUnavailableError(connection.base_url)

    with ChromaClient.from_connection(connection) as probe:
        try:
            probe.list_databases(tenant)
        except MyChromaError as e:
            raise TenantAccessError(tenant, e) from e

    logger.info(f"Connected to {connection.base_url} (tenant: {tenant})")
    return connection


def parse_metadata(raw: MetadataInput) -> Optional[Dict[str, Any]]:
    """
    Turn operator-supplied metadata into a mapping.

    Accepts a mapping, JSON object text, or nothing. Empty input and
    JSON ``null`` yield None.

    Raises:
        ValueError: If the text is not a JSON object
    """
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        return dict(raw) or None
    if not raw.strip():
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError("Invalid JSON in metadata.") from e
    if value is None or (isinstance(value, list) and not value):
        return None
    if not isinstance(value, dict):
        raise ValueError("Invalid JSON in metadata.")
    return value or None


def generate_document_id() -> str:
    return f"doc-{uuid.uuid4().hex[:13]}"


class AdminSession:
    def __init__(self, connection: Connection, embedder: BaseEmbedding) -> None:
        self.connection = connection
        self.embedder = embedder
        self._clients: Dict[str, ChromaClient] = {}

    def client(self, database: Optional[str] = None) -> ChromaClient:
        """Get or create the client for ``database`` (the connection's by default)."""
        name = database or self.connection.database
        if name not in self._clients:
            self._clients[name] = ChromaClient.from_connection(
                self.connection.with_database(name)
            )
        return self._clients[name]

    def disconnect(self) -> None:
        for client in self._clients.values():
            client.close()
        self._clients.clear()

    def __enter__(self) -> "AdminSession":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.disconnect()

    # Databases

    def list_databases(self) -> List[DatabaseInfo]:
        return self.client().list_databases(self.connection.tenant)

    def create_database(self, name: str) -> Any:
        logger.info(f"Creating database {name} in tenant {self.connection.tenant}")
        return self.client().create_database(name)

    def delete_database(self, name: str) -> Any:
        logger.info(f"Deleting database {name} in tenant {self.connection.tenant}")
        result = self.client().delete_database(name)
        dropped = self._clients.pop(name, None)
        if dropped is not None:
            dropped.close()
        return result

    # Collections

    def list_collections(self, database: Optional[str] = None) -> List[CollectionSummary]:
        """List collections with their document counts."""
        client = self.client(database)
        summaries = []
        for collection in client.list_collections():
            # Seed the cache so counting does not list collections again
            client.collection_ids.set(collection.name, collection.id)
            try:
                count: Optional[int] = client.count_documents(collection.name)
            except MyChromaError as e:
                logger.warning(f"Could not count documents in {collection.name}: {e}")
                count = None
            summaries.append(
                CollectionSummary(
                    **collection.model_dump(), document_count=count
                )
            )
        return summaries

    def create_collection(
        self,
        name: str,
        metadata: MetadataInput = None,
        database: Optional[str] = None,
    ) -> Any:
        return self.client(database).create_collection(name, parse_metadata(metadata))

    def delete_collection(self, name: str, database: Optional[str] = None) -> Any:
        return self.client(database).delete_collection(name)

    # Documents

    def browse_collection(
        self,
        collection: str,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        database: Optional[str] = None,
    ) -> DocumentPage:
        client = self.client(database)
        page = max(1, page)
        page_size = max(1, page_size)
        offset = (page - 1) * page_size

        total = client.count_documents(collection)
        result = client.get_documents(collection, limit=page_size, offset=offset)

        return DocumentPage(
            collection=collection,
            page=page,
            page_size=page_size,
            total_count=total,
            documents=result.records(),
        )

    def get_document(
        self, collection: str, doc_id: str, database: Optional[str] = None
    ) -> DocumentRecord:
        result = self.client(database).get_documents(collection, ids=[doc_id], limit=1)
        records = result.records()
        if not records:
            raise NotFoundError(
                f"Document not found: {doc_id} (collection: {collection})",
                name=doc_id,
            )
        return records[0]

    def add_document(
        self,
        collection: str,
        text: str,
        metadata: MetadataInput = None,
        doc_id: Optional[str] = None,
        database: Optional[str] = None,
    ) -> str:
        """Embed ``text`` and add it as a new document; returns the document id."""
        parsed = parse_metadata(metadata)
        doc_id = (doc_id or "").strip() or generate_document_id()

        embedding = self.embedder.generate_embedding(text)
        self.client(database).add_documents(
            collection, [text], [embedding], [parsed], [doc_id]
        )
        logger.info(f"Added document {doc_id} to {collection}")
        return doc_id

    def edit_document(
        self,
        collection: str,
        doc_id: str,
        text: str,
        metadata: MetadataInput = None,
        database: Optional[str] = None,
    ) -> Any:
        """Replace a document's text and metadata, re-embedding the text."""
        parsed = parse_metadata(metadata)
        embedding = self.embedder.generate_embedding(text)
        result = self.client(database).update_documents(
            collection, [text], [embedding], [parsed], [doc_id]
        )
        logger.info(f"Updated document {doc_id} in {collection}")
        return result

    def delete_document(
        self, collection: str, doc_id: str, database: Optional[str] = None
    ) -> Any:
        return self.client(database).delete_document(collection, [doc_id])

    def semantic_search(
        self,
        collection: str,
        query_text: str,
        n_results: int = 5,
        database: Optional[str] = None,
    ) -> SearchResults:
        embedding = self.embedder.generate_embedding(query_text)
        result = self.client(database).query_collection(
            collection, [embedding], n_results
        )
        return SearchResults(query=query_text, n_results=n_results, rows=result.rows())
