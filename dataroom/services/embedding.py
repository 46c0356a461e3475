"""OpenAI embedding generation service."""

import asyncio
import logging
from typing import List, Optional

from openai import AsyncOpenAI, AuthenticationError

from dataroom.core.config import settings
from dataroom.core.exceptions import ProviderError, ProviderUnavailable
from dataroom.monitoring.metrics import embedding_requests_total
from dataroom.services.openai_client import require_client

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Service for generating embeddings using OpenAI."""

    def __init__(self, client: Optional[AsyncOpenAI]) -> None:
        """
        Initialize the embedding service.

        Args:
            client: Shared OpenAI client, or None when unconfigured.
        """
        self.client = client
        self.model = settings.embedding_model
        self.dimensions = settings.embedding_dimensions
        self.timeout = settings.provider_timeout_seconds

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Text string to embed.

        Returns:
            Embedding vector of length `dimensions`.

        Raises:
            ProviderUnavailable: If no usable API key is configured.
            ProviderError: If the embedding call fails or times out.
        """
        client = require_client(self.client)
        embedding_requests_total.inc()

        try:
            response = await asyncio.wait_for(
                client.embeddings.create(
                    model=self.model,
                    input=text,
                    dimensions=self.dimensions,
                ),
                timeout=self.timeout,
            )
        except AuthenticationError as e:
            raise ProviderUnavailable(f"Invalid OpenAI API key: {str(e)}") from e
        except asyncio.TimeoutError as e:
            raise ProviderError(
                f"Embedding request timed out after {self.timeout}s") from e
        except Exception as e:
            raise ProviderError(f"Failed to generate embedding: {str(e)}") from e

        embedding = list(response.data[0].embedding)
        if len(embedding) != self.dimensions:
            raise ProviderError(
                f"Expected embedding of length {self.dimensions}, got {len(embedding)}")
        return embedding
