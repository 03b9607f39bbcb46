from __future__ import annotations

import logging
import os
from typing import Any, List, Optional

import requests

from ..core.exceptions import ConfigurationError, DecodeError, RemoteError
from .base import BaseEmbedding

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"
DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAIEmbedding(BaseEmbedding):
    """
    OpenAI text embedding client.
    Sends one text per request to the ``/embeddings`` endpoint.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        """
        Initialize OpenAI embedding client.

        Args:
            api_key: OpenAI API key
            model: Default model (falls back to OPENAI_EMBEDDING_MODEL env var,
                then text-embedding-3-small)
            base_url: API base URL (defaults to https://api.openai.com/v1)
        """
        self.api_key = api_key
        self.model = model or os.getenv("OPENAI_EMBEDDING_MODEL") or DEFAULT_MODEL
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._session: Optional[requests.Session] = None

    @property
    def url(self) -> str:
        return f"{self.base_url}/embeddings"

    def _get_session(self) -> requests.Session:
        """Get or create HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(
                {
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                }
            )
        return self._session

    def generate_embedding(self, text: str, model: Optional[str] = None) -> List[float]:
        """
        Encode text into an embedding vector.

        Raises:
            ConfigurationError: If no API key is configured
            RemoteError: If the API answers with a non-200 status
            DecodeError: If the response has no embedding in it
        """
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is required")

        payload: dict[str, Any] = {"input": text, "model": model or self.model}
        logger.debug(f"Requesting embedding from {self.url} with model {payload['model']}")

        response = self._get_session().post(self.url, json=payload)

        if response.status_code != 200:
            raise RemoteError(
                _error_message(response),
                url=self.url,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
            return data["data"][0]["embedding"]
        except ValueError as e:
            raise DecodeError(
                f"OpenAI returned invalid JSON: {e}", url=self.url, body=response.text
            ) from e
        except (KeyError, IndexError, TypeError) as e:
            raise DecodeError(
                f"Unexpected response format: {response.text}",
                url=self.url,
                body=response.text,
            ) from e

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None


def _error_message(response: requests.Response) -> str:
    """Pull ``error.message`` out of an OpenAI error envelope, else the raw body."""
    try:
        data = response.json()
    except ValueError:
        return response.text

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.text
