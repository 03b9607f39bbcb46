"""
Chroma vector store access.

Provides the REST client, its collection-id cache and the server health
probe.
"""

from mychroma.vector_store.cache import CollectionIdCache
from mychroma.vector_store.client import API_PREFIX, ChromaClient
from mychroma.vector_store.health import check_health

__all__ = [
    "API_PREFIX",
    "ChromaClient",
    "CollectionIdCache",
    "check_health",
]
