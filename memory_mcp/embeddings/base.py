"""
Abstract base class for embedding providers.

Defines the interface that all embedding providers must implement,
allowing the storage layer to stay ignorant of where vectors come from.
"""

from abc import ABC, abstractmethod

from ..models import EmbeddingProviderType


class EmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.

    Implement this interface to add support for a new embedding service.
    A new provider also needs its own vector table in
    ``memory_mcp.storage.tables``.

    The accessors report construction-time configuration only; they never
    inspect the length of vectors actually returned by the remote API.
    """

    @property
    @abstractmethod
    def identity(self) -> EmbeddingProviderType:
        """Return which provider this is."""
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """Return the configured embedding model."""
        pass

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the declared dimension of embeddings produced."""
        pass

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single text.

        Raises:
            ProviderError: If the remote call fails or the response has no vector
        """
        pass

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Generate embeddings for multiple texts.

        Returns:
            One vector per input text, in input order.
        """
        pass

    async def close(self) -> None:
        """Release any underlying HTTP client."""
        pass
