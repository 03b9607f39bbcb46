"""Runtime configuration for mychroma.

Values come from environment variables; the CLI loads a ``.env`` file into
the environment first with python-dotenv.
"""

import os
from typing import Optional

from pydantic import BaseModel

from .core.model import (
    DEFAULT_DATABASE,
    DEFAULT_TENANT,
    Connection,
    EmbeddingModelConfig,
)
from .embedding.openai import DEFAULT_BASE_URL as DEFAULT_OPENAI_BASE_URL
from .embedding.openai import DEFAULT_MODEL as DEFAULT_EMBEDDING_MODEL
from .vector_store.health import DEFAULT_HEALTH_TIMEOUT

DEFAULT_HOST = "http://localhost"
DEFAULT_PORT = 8000

# Documents shown per page when browsing a collection
DEFAULT_PAGE_SIZE = 50

# List-view truncation limits (characters)
DEFAULT_LISTVIEW_DOC_LIMIT = 1024
DEFAULT_LISTVIEW_METADATA_LIMIT = 1024


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


class Settings(BaseModel):
    chroma_host: str = DEFAULT_HOST
    chroma_port: int = DEFAULT_PORT
    chroma_tenant: str = DEFAULT_TENANT
    chroma_database: str = DEFAULT_DATABASE
    chroma_api_key: Optional[str] = None
    health_timeout: float = DEFAULT_HEALTH_TIMEOUT

    openai_api_key: Optional[str] = None
    openai_embedding_model: str = DEFAULT_EMBEDDING_MODEL
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL

    page_size: int = DEFAULT_PAGE_SIZE
    listview_doc_limit: int = DEFAULT_LISTVIEW_DOC_LIMIT
    listview_metadata_limit: int = DEFAULT_LISTVIEW_METADATA_LIMIT

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            chroma_host=os.getenv("CHROMA_HOST", DEFAULT_HOST),
            chroma_port=_env_int("CHROMA_PORT", DEFAULT_PORT),
            chroma_tenant=os.getenv("CHROMA_TENANT", DEFAULT_TENANT),
            chroma_database=os.getenv("CHROMA_DATABASE", DEFAULT_DATABASE),
            chroma_api_key=os.getenv("CHROMA_API_KEY") or None,
            health_timeout=_env_float("CHROMA_HEALTH_TIMEOUT", DEFAULT_HEALTH_TIMEOUT),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_embedding_model=os.getenv(
                "OPENAI_EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL
            ),
            openai_base_url=os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL),
            page_size=_env_int("MYCHROMA_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            listview_doc_limit=_env_int(
                "listview_doc_limit", DEFAULT_LISTVIEW_DOC_LIMIT
            ),
            listview_metadata_limit=_env_int(
                "listview_metadata_limit", DEFAULT_LISTVIEW_METADATA_LIMIT
            ),
        )

    def connection(self) -> Connection:
        return Connection.from_host_port(
            self.chroma_host,
            self.chroma_port,
            tenant=self.chroma_tenant,
            api_key=self.chroma_api_key,
            database=self.chroma_database,
        )

    def embedding_config(self) -> EmbeddingModelConfig:
        return EmbeddingModelConfig(
            model_name=self.openai_embedding_model,
            base_url=self.openai_base_url,
            api_key=self.openai_api_key,
        )


def truncate(text: str, limit: int) -> str:
    """Shorten text for list views, marking the cut with '...'."""
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + "..."
