from abc import ABC, abstractmethod
from typing import List, Optional


class BaseEmbedding(ABC):
    """Abstract base class for embedding models."""

    @abstractmethod
    def generate_embedding(self, text: str, model: Optional[str] = None) -> List[float]:
        """
        Encode a single text into an embedding vector.

        Args:
            text: Text to embed
            model: Override the default embedding model

        Returns:
            Embedding vector (list of floats)
        """
        pass
