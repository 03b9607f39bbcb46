from ..core.model import EmbeddingModelConfig
from .base import BaseEmbedding
from .openai import OpenAIEmbedding


def create_embedding_client(model_config: EmbeddingModelConfig) -> BaseEmbedding:
    """
    Creates a BaseEmbedding instance from an EmbeddingModelConfig.
    """
    provider = model_config.model_provider.lower().strip()
    if provider == "openai":
        return OpenAIEmbedding(
            api_key=model_config.api_key,
            model=model_config.model_name,
            base_url=model_config.base_url,
        )
    raise ValueError(f"Unsupported model provider: {model_config.model_provider}")
