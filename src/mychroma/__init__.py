"""mychroma - administrative client for Chroma vector databases

This package provides:
- A REST client for Chroma tenants, databases, collections and documents
- An OpenAI embedding client for semantic search
- An admin session that ties both together
- A command-line interface

Usage:
    # Command line
    python -m mychroma --host http://localhost --port 8000 list-collections

    # In code
    from mychroma import AdminSession, OpenAIEmbedding, connect
    connection = connect("http://localhost", 8000, "default_tenant")
    session = AdminSession(connection, OpenAIEmbedding(api_key="..."))
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mychroma")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

from .core.exceptions import (
    ConfigurationError,
    DecodeError,
    MyChromaError,
    NotFoundError,
    RemoteError,
)
from .core.model import Connection
from .embedding import BaseEmbedding, OpenAIEmbedding
from .session import AdminSession, connect
from .vector_store import ChromaClient, check_health

__all__ = [
    "AdminSession",
    "BaseEmbedding",
    "ChromaClient",
    "Connection",
    "ConfigurationError",
    "DecodeError",
    "MyChromaError",
    "NotFoundError",
    "OpenAIEmbedding",
    "RemoteError",
    "check_health",
    "connect",
    "__version__",
]
