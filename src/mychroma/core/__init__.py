from .exceptions import (
    ConfigurationError,
    DecodeError,
    MyChromaError,
    NotFoundError,
    RemoteError,
    ServerUnavailableError,
    TenantAccessError,
)
from .model import Connection, EmbeddingModelConfig

__all__ = [
    "Connection",
    "EmbeddingModelConfig",
    "MyChromaError",
    "RemoteError",
    "NotFoundError",
    "DecodeError",
    "ConfigurationError",
    "ServerUnavailableError",
    "TenantAccessError",
]
