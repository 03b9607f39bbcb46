from .adapter import create_embedding_client
from .base import BaseEmbedding
from .openai import OpenAIEmbedding

__all__ = [
    "BaseEmbedding",
    "OpenAIEmbedding",
    "create_embedding_client",
]
