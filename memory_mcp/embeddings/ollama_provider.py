"""
Ollama Embedding Provider Implementation.

Talks to a locally hosted Ollama server over its HTTP API. Ollama's
embeddings endpoint takes one prompt per request, so batches are embedded
one text at a time, in order.
"""

import logging

import httpx

from ..exceptions import ProviderError
from ..models import EmbeddingProviderType
from .base import EmbeddingProvider

logger = logging.getLogger("memory_mcp.embeddings.ollama")


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Ollama embedding provider (e.g. nomic-embed-text, 768 dimensions)."""

    EMBEDDINGS_PATH = "/api/embeddings"

    def __init__(
        self,
        base_url: str,
        model: str = "nomic-embed-text",
        dimensions: int = 768,
    ):
        """
        Initialize the Ollama provider.

        Args:
            base_url: Ollama server URL, e.g. http://localhost:11434
            model: Embedding model to use
            dimensions: Declared output dimensions
        """
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._dimensions = dimensions
        self._client: httpx.AsyncClient | None = None
        logger.info(
            f"OllamaEmbeddingProvider initialized: url={self._base_url}, "
            f"model={model}, dimensions={dimensions}"
        )

    @property
    def identity(self) -> EmbeddingProviderType:
        return EmbeddingProviderType.OLLAMA

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client. No timeout is imposed here."""
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self._base_url, timeout=None)
        return self._client

    async def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        client = self._get_client()

        try:
            response = await client.post(
                self.EMBEDDINGS_PATH,
                json={"model": self._model, "prompt": text},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Ollama embedding error: {e}")
            raise ProviderError(f"Ollama embedding error: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Ollama embedding error: invalid JSON response ({e})") from e

        embedding = payload.get("embedding") if isinstance(payload, dict) else None
        if not isinstance(embedding, list) or not embedding:
            raise ProviderError("Ollama embedding error: missing or invalid embedding")

        try:
            return [float(value) for value in embedding]
        except (TypeError, ValueError) as e:
            raise ProviderError(f"Ollama embedding error: non-numeric embedding value ({e})") from e

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts, sequentially."""
        embeddings = []
        for text in texts:
            embeddings.append(await self.embed(text))
        return embeddings

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
