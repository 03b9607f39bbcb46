"""Typed shapes for Chroma REST responses.

The server owns every entity; these models only unpack what it returns.
Unknown fields are kept so newer server versions do not break parsing.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DatabaseInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    id: Optional[str] = None
    tenant: Optional[str] = None


class CollectionInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    id: str
    metadata: Optional[Dict[str, Any]] = None


class CollectionSummary(CollectionInfo):
    """Collection listing row with its document count.

    ``document_count`` is None when counting failed on the server.
    """

    document_count: Optional[int] = None


class DocumentRecord(BaseModel):
    id: str
    document: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    embedding: Optional[List[float]] = None


class SearchResultRow(BaseModel):
    id: str
    document: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    distance: Optional[float] = None

    @property
    def similarity(self) -> Optional[float]:
        """Distance converted to a similarity percentage."""
        if self.distance is None:
            return None
        return round((1 - self.distance) * 100, 2)


def _column(values: Optional[List[Any]], index: int) -> Any:
    if not values or index >= len(values):
        return None
    return values[index]


class GetResult(BaseModel):
    """Parallel arrays returned by the collection ``get`` endpoint."""

    model_config = ConfigDict(extra="allow")

    ids: List[str] = Field(default_factory=list)
    documents: Optional[List[Optional[str]]] = None
    metadatas: Optional[List[Optional[Dict[str, Any]]]] = None
    embeddings: Optional[List[Optional[List[float]]]] = None

    def records(self) -> List[DocumentRecord]:
        return [
            DocumentRecord(
                id=doc_id,
                document=_column(self.documents, i),
                metadata=_column(self.metadatas, i),
                embedding=_column(self.embeddings, i),
            )
            for i, doc_id in enumerate(self.ids)
        ]


class QueryResult(BaseModel):
    """Nested arrays returned by the collection ``query`` endpoint.

    The outer list has one entry per query embedding; inner lists are
    ordered by the server, closest first.
    """

    model_config = ConfigDict(extra="allow")

    ids: List[List[str]] = Field(default_factory=list)
    documents: Optional[List[Optional[List[Optional[str]]]]] = None
    metadatas: Optional[List[Optional[List[Optional[Dict[str, Any]]]]]] = None
    distances: Optional[List[Optional[List[Optional[float]]]]] = None

    def rows(self, query_index: int = 0) -> List[SearchResultRow]:
        if query_index >= len(self.ids):
            return []
        documents = _column(self.documents, query_index)
        metadatas = _column(self.metadatas, query_index)
        distances = _column(self.distances, query_index)
        return [
            SearchResultRow(
                id=doc_id,
                document=_column(documents, i),
                metadata=_column(metadatas, i),
                distance=_column(distances, i),
            )
            for i, doc_id in enumerate(self.ids[query_index])
        ]


class DocumentPage(BaseModel):
    """One page of documents from a collection browse."""

    collection: str
    page: int
    page_size: int
    total_count: int
    documents: List[DocumentRecord] = Field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def page_window(self, radius: int = 2) -> List[int]:
        """Page numbers shown around the current page."""
        start = max(1, self.page - radius)
        end = min(self.total_pages, self.page + radius)
        return list(range(start, end + 1))


class SearchResults(BaseModel):
    query: str
    n_results: int
    rows: List[SearchResultRow] = Field(default_factory=list)
