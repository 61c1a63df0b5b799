"""
OpenAI Embedding Provider Implementation.

Uses OpenAI's embedding models through the async client. Batches are sent
as a single request.
"""

import logging

from openai import AsyncOpenAI, OpenAIError

from ..exceptions import ProviderError
from ..models import EmbeddingProviderType
from .base import EmbeddingProvider

logger = logging.getLogger("memory_mcp.embeddings.openai")


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """
    OpenAI embedding provider using text-embedding models.

    text-embedding-3 models support native dimension reduction via the
    ``dimensions`` request parameter. It is only sent when the declared
    dimensionality is below the model's default.

    Models:
    - text-embedding-3-small: default 1536 dimensions
    - text-embedding-3-large: default 3072 dimensions (can be reduced)
    - text-embedding-ada-002: fixed 1536 dimensions
    """

    # Default dimensions for models that accept the dimensions parameter
    MODEL_DEFAULT_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
    }

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = 1536,
    ):
        """
        Initialize OpenAI embedding provider.

        Args:
            api_key: OpenAI API key
            model: Embedding model name
            dimensions: Declared output dimensions
        """
        self._api_key = api_key
        self._model = model
        self._dimensions = dimensions
        self._client: AsyncOpenAI | None = None

        default_dim = self.MODEL_DEFAULT_DIMENSIONS.get(model)
        if default_dim is not None and dimensions < default_dim:
            self._requested_dimensions: int | None = dimensions
        else:
            self._requested_dimensions = None

        logger.info(
            f"OpenAIEmbeddingProvider initialized: model={model}, dimensions={dimensions}"
        )

    @property
    def identity(self) -> EmbeddingProviderType:
        return EmbeddingProviderType.OPENAI

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the async OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    def _request_kwargs(self, input) -> dict:
        kwargs = {
            "model": self._model,
            "input": input,
        }
        if self._requested_dimensions is not None:
            kwargs["dimensions"] = self._requested_dimensions
        return kwargs

    async def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        client = self._get_client()

        try:
            response = await client.embeddings.create(**self._request_kwargs(text))
        except OpenAIError as e:
            logger.error(f"OpenAI embedding error: {e}")
            raise ProviderError(f"OpenAI embedding error: {e}") from e

        if not response.data or not response.data[0].embedding:
            raise ProviderError("OpenAI embedding error: response contained no embedding")

        return list(response.data[0].embedding)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts in one request."""
        if not texts:
            return []

        client = self._get_client()

        try:
            response = await client.embeddings.create(**self._request_kwargs(texts))
        except OpenAIError as e:
            logger.error(f"OpenAI embeddings error: {e}")
            raise ProviderError(f"OpenAI embeddings error: {e}") from e

        if len(response.data) != len(texts):
            raise ProviderError(
                f"OpenAI embeddings error: expected {len(texts)} embeddings, "
                f"got {len(response.data)}"
            )

        # Sort by index to maintain order
        sorted_data = sorted(response.data, key=lambda x: x.index)
        return [list(item.embedding) for item in sorted_data]

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
