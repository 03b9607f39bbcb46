from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TENANT = "default_tenant"
DEFAULT_DATABASE = "default_database"


class Connection(BaseModel):
    """Connection details held for the lifetime of an admin session."""

    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    tenant: str = DEFAULT_TENANT
    database: str = DEFAULT_DATABASE

    @field_validator("base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_api_key_is_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_host_port(
        cls,
        host: str,
        port: Union[int, str],
        tenant: str = DEFAULT_TENANT,
        api_key: Optional[str] = None,
        database: str = DEFAULT_DATABASE,
    ) -> "Connection":
        """Build a connection from the host and port an operator types in."""
        return cls(
            base_url=f"{host.rstrip('/')}:{port}",
            api_key=api_key,
            tenant=tenant,
            database=database,
        )

    def with_database(self, database: str) -> "Connection":
        return self.model_copy(update={"database": database})


class EmbeddingModelConfig(BaseModel):
    model_provider: str = "openai"
    model_name: str = "text-embedding-3-small"
    base_url: Optional[str] = None
    api_key: Optional[str] = None
