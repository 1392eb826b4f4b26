"""Embeddings service backed by the Hugging Face Inference API.

Every call is a fresh round-trip to the feature-extraction pipeline of a
fixed model; nothing is cached.
"""

import asyncio
import logging
from typing import Any, List, Optional

import numpy as np
import requests

from social_copy.config import settings
from social_copy.errors import EmbeddingError
from social_copy.security import sanitize_text_for_llm

logger = logging.getLogger(__name__)


def to_vector(payload: Any) -> List[float]:
    """Validate a feature-extraction response and return it as a vector.

    The provider returns either a flat list of numbers or a list of rows,
    in which case the first row is used.

    Args:
        payload: Decoded JSON response

    Returns:
        Embedding vector

    Raises:
        EmbeddingError: If the payload is not a numeric vector
    """
    if isinstance(payload, dict):
        raise EmbeddingError(f"Provider returned an error object: {payload.get('error', payload)}")

    try:
        array = np.asarray(payload, dtype=float)
    except (TypeError, ValueError) as e:
        raise EmbeddingError(f"Response is not a numeric vector: {e}") from e

    if array.ndim == 2 and array.shape[0] > 0:
        array = array[0]

    if array.ndim != 1 or array.size == 0:
        raise EmbeddingError(f"Unexpected embedding shape: {array.shape}")

    if not np.all(np.isfinite(array)):
        raise EmbeddingError("Embedding contains non-finite values")

    return array.tolist()


class EmbeddingsService:
    """Service for generating embeddings through Hugging Face."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        """Initialize the embeddings service.

        Args:
            api_key: Hugging Face token (optional, uses settings by default)
            model: Model id (optional, uses settings by default)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key or settings.huggingface_api_key
        self.model = model or settings.embedding_model
        self.url = settings.embedding_api_url.format(model=self.model)
        self.timeout = timeout or settings.request_timeout

    def _post(self, text: str) -> Any:
        response = requests.post(
            self.url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={"inputs": text, "options": {"wait_for_model": True}},
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    async def generate_embedding(self, text: str) -> List[float]:
        """Generate embedding vector for text.

        Args:
            text: Text to process

        Returns:
            Embedding vector

        Raises:
            EmbeddingError: On transport failure or malformed response
        """
        text = sanitize_text_for_llm(text)
        if not text:
            raise EmbeddingError("Empty text after sanitization")

        try:
            payload = await asyncio.to_thread(self._post, text)
        except requests.RequestException as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e
        except ValueError as e:
            # Body was not JSON
            raise EmbeddingError(f"Embedding response is not JSON: {e}") from e

        embedding = to_vector(payload)
        logger.debug(f"Embedding generated: {len(embedding)} dimensions")
        return embedding
