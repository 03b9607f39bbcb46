from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests
from pydantic import TypeAdapter, ValidationError

from ..core.exceptions import DecodeError, NotFoundError, RemoteError
from ..core.model import (
    DEFAULT_BASE_URL,
    DEFAULT_DATABASE,
    DEFAULT_TENANT,
    Connection,
)
from ..core.schemas import CollectionInfo, DatabaseInfo, GetResult, QueryResult
from .cache import CollectionIdCache

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v2"

# Methods that carry a JSON body
_BODY_METHODS = {"POST", "PUT", "PATCH"}

_DATABASES = TypeAdapter(List[DatabaseInfo])
_COLLECTIONS = TypeAdapter(List[CollectionInfo])
_COLLECTION = TypeAdapter(CollectionInfo)
_GET_RESULT = TypeAdapter(GetResult)
_QUERY_RESULT = TypeAdapter(QueryResult)
_COUNT = TypeAdapter(int)


class ChromaClient:
    """
    HTTP client for the Chroma v2 REST API.

    Scoped to one tenant and one database for its whole lifetime.
    Collections are addressed by name; their server ids are resolved lazily
    and kept in a per-client ``CollectionIdCache``.

    Example:
        >>> client = ChromaClient("http://localhost:8000")
        >>> client.create_collection("notes")
        >>> client.count_documents("notes")
        0
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: Optional[str] = None,
        tenant: str = DEFAULT_TENANT,
        database: str = DEFAULT_DATABASE,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._tenant = tenant
        self._database = database
        self.collection_ids = CollectionIdCache()
        self._session: Optional[requests.Session] = None

    @classmethod
    def from_connection(cls, connection: Connection) -> "ChromaClient":
        return cls(
            base_url=connection.base_url,
            api_key=connection.api_key,
            tenant=connection.tenant,
            database=connection.database,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    @property
    def tenant(self) -> str:
        return self._tenant

    @property
    def database(self) -> str:
        return self._database

    def _get_session(self) -> requests.Session:
        """Get or create HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"Content-Type": "application/json"})
            if self._api_key:
                self._session.headers["Authorization"] = f"Bearer {self._api_key}"
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "ChromaClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _tenant_url(self, tenant: Optional[str] = None) -> str:
        return f"{self._base_url}{API_PREFIX}/tenants/{tenant or self._tenant}"

    def _database_url(self) -> str:
        return f"{self._tenant_url()}/databases/{self._database}"

    def _send(
        self,
        url: str,
        method: str = "GET",
        payload: Optional[Dict[str, Any]] = None,
        response_type: Optional[TypeAdapter] = None,
    ) -> Any:
        """
        Send one request and decode its JSON response.

        With ``response_type`` the decoded JSON is validated into that type;
        an empty body is then a format error too.

        Raises:
            RemoteError: If the server answers with status >= 400
            DecodeError: If a successful response is not valid JSON or
                does not match ``response_type``
        """
        logger.debug(f"Making {method} request to: {url}")

        kwargs: Dict[str, Any] = {}
        if payload is not None and method in _BODY_METHODS:
            logger.debug(f"Request data: {payload}")
            kwargs["json"] = payload

        response = self._get_session().request(method, url, **kwargs)
        logger.debug(f"Response code: {response.status_code}, Response: {response.text}")

        if response.status_code >= 400:
            raise RemoteError(
                f"ChromaDB API Error: {url} {response.text}",
                url=url,
                status_code=response.status_code,
                body=response.text,
            )

        data = None
        if response.text.strip():
            try:
                data = response.json()
            except ValueError as e:
                raise DecodeError(
                    f"ChromaDB returned invalid JSON from {url}: {e}",
                    url=url,
                    body=response.text,
                ) from e

        if response_type is None:
            return data

        try:
            return response_type.validate_python(data)
        except ValidationError as e:
            raise DecodeError(
                f"Unexpected response format from {url}: {response.text}",
                url=url,
                body=response.text,
            ) from e

    def _request(
        self,
        endpoint: str,
        method: str = "GET",
        payload: Optional[Dict[str, Any]] = None,
        response_type: Optional[TypeAdapter] = None,
    ) -> Any:
        """Request a database-level endpoint such as ``/collections``."""
        return self._send(
            f"{self._database_url()}{endpoint}", method, payload, response_type
        )

    def _request_at_tenant_level(
        self,
        endpoint: str,
        method: str = "GET",
        payload: Optional[Dict[str, Any]] = None,
        tenant: Optional[str] = None,
        response_type: Optional[TypeAdapter] = None,
    ) -> Any:
        """Request a tenant-level endpoint such as ``/databases``."""
        return self._send(
            f"{self._tenant_url(tenant)}{endpoint}", method, payload, response_type
        )

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def list_databases(self, tenant: Optional[str] = None) -> List[DatabaseInfo]:
        """List databases of ``tenant`` (defaults to the client's tenant)."""
        return self._request_at_tenant_level(
            "/databases", tenant=tenant, response_type=_DATABASES
        )

    def create_database(self, name: str) -> Any:
        return self._request_at_tenant_level("/databases", "POST", {"name": name})

    def delete_database(self, name: str) -> Any:
        return self._request_at_tenant_level(f"/databases/{name}", "DELETE")

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def resolve_collection_id(self, name: str, force_refresh: bool = False) -> str:
        """
        Resolve a collection name to its server id.

        Uses the cached id unless ``force_refresh`` is set; otherwise lists
        every collection and caches the match.

        Raises:
            NotFoundError: If no collection has this name
        """
        if not force_refresh:
            cached = self.collection_ids.get(name)
            if cached is not None:
                return cached

        collections = self.list_collections()
        for collection in collections:
            if collection.name == name:
                self.collection_ids.set(name, collection.id)
                return collection.id

        available = [c.name for c in collections]
        raise NotFoundError(
            f"Collection not found: {name} "
            f"(Available collections: {', '.join(available)})",
            name=name,
            available=available,
        )

    def refresh_collection_id(self, name: str) -> str:
        return self.resolve_collection_id(name, force_refresh=True)

    def invalidate_collection_cache(self, name: Optional[str] = None) -> None:
        self.collection_ids.invalidate(name)

    def list_collections(self) -> List[CollectionInfo]:
        return self._request("/collections", response_type=_COLLECTIONS)

    def create_collection(
        self, name: str, metadata: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """
        Create a collection.

        The ``metadata`` field is left out of the request when it is empty,
        since the server treats an absent field differently from ``{}``.
        """
        payload: Dict[str, Any] = {"name": name}
        if metadata:
            payload["metadata"] = dict(metadata)

        response = self._request("/collections", "POST", payload)

        if isinstance(response, dict) and response.get("id"):
            self.collection_ids.set(name, response["id"])
        return response

    def delete_collection(self, name: str) -> Any:
        # Resolving first surfaces unknown names as NotFoundError
        self.resolve_collection_id(name)
        logger.info(
            f"Deleting collection {name} "
            f"(tenant: {self._tenant}, database: {self._database})"
        )
        try:
            return self._request(f"/collections/{name}", "DELETE")
        finally:
            self.collection_ids.invalidate(name)

    def get_collection(self, name: str) -> CollectionInfo:
        collection_id = self.resolve_collection_id(name)
        return self._request(f"/collections/{collection_id}", response_type=_COLLECTION)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_documents(
        self,
        collection_name: str,
        documents: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        metadatas: Sequence[Optional[Mapping[str, Any]]] = (),
        ids: Sequence[str] = (),
    ) -> Any:
        """Add documents with their embeddings; array lengths are checked by the server."""
        collection_id = self.resolve_collection_id(collection_name)
        return self._request(
            f"/collections/{collection_id}/add",
            "POST",
            _document_payload(documents, embeddings, metadatas, ids),
        )

    def update_documents(
        self,
        collection_name: str,
        documents: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        metadatas: Sequence[Optional[Mapping[str, Any]]] = (),
        ids: Sequence[str] = (),
    ) -> Any:
        collection_id = self.resolve_collection_id(collection_name)
        return self._request(
            f"/collections/{collection_id}/update",
            "POST",
            _document_payload(documents, embeddings, metadatas, ids),
        )

    def query_collection(
        self,
        collection_name: str,
        query_embeddings: Sequence[Sequence[float]],
        n_results: int = 5,
        where: Optional[Mapping[str, Any]] = None,
    ) -> QueryResult:
        """
        Query a collection for the documents nearest to each embedding.

        Results keep the server's order, closest first. ``where`` is left
        out of the request when empty.
        """
        collection_id = self.resolve_collection_id(collection_name)
        payload: Dict[str, Any] = {
            "query_embeddings": [list(e) for e in query_embeddings],
            "n_results": n_results,
        }
        if where:
            payload["where"] = dict(where)

        return self._request(
            f"/collections/{collection_id}/query", "POST", payload, _QUERY_RESULT
        )

    def get_documents(
        self,
        collection_name: str,
        ids: Optional[Sequence[str]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> GetResult:
        """
        Fetch documents, optionally restricted to ``ids``.

        An ``offset`` of zero is not sent at all; some server versions
        treat an explicit zero differently from the default.
        """
        collection_id = self.resolve_collection_id(collection_name)
        payload: Dict[str, Any] = {"limit": limit}
        if ids:
            payload["ids"] = list(ids)
        if offset > 0:
            payload["offset"] = offset

        return self._request(
            f"/collections/{collection_id}/get", "POST", payload, _GET_RESULT
        )

    def count_documents(self, collection_name: str) -> int:
        collection_id = self.resolve_collection_id(collection_name)
        return self._request(f"/collections/{collection_id}/count", response_type=_COUNT)

    def delete_document(self, collection_name: str, ids: Sequence[str]) -> Any:
        collection_id = self.resolve_collection_id(collection_name)
        return self._request(
            f"/collections/{collection_id}/delete", "POST", {"ids": list(ids)}
        )


def _document_payload(
    documents: Sequence[str],
    embeddings: Sequence[Sequence[float]],
    metadatas: Sequence[Optional[Mapping[str, Any]]],
    ids: Sequence[str],
) -> Dict[str, Any]:
    return {
        "documents": list(documents),
        "embeddings": [list(e) for e in embeddings],
        "metadatas": [dict(m) if m else None for m in metadatas],
        "ids": list(ids),
    }
