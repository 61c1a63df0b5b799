"""
Base interface for memory storage backends.

Defines the abstract contract that the PostgreSQL (pgvector) and the
embedded SQLite backends implement.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import (
    EmbeddingProviderType,
    ListMemoriesInput,
    Memory,
    MemoryStats,
    MemoryWithEmbedding,
    SearchMemoryInput,
    SearchResult,
    StoreMemoryInput,
)

DEFAULT_IMPORTANCE = 1
DEFAULT_SEARCH_LIMIT = 10
DEFAULT_SIMILARITY_THRESHOLD = 0.7


def search_defaults(input: SearchMemoryInput) -> tuple[float, int]:
    """Return (threshold, limit) with defaults applied. A threshold of 0 is kept."""
    threshold = (
        input.similarity_threshold
        if input.similarity_threshold is not None
        else DEFAULT_SIMILARITY_THRESHOLD
    )
    limit = input.limit if input.limit is not None else DEFAULT_SEARCH_LIMIT
    return threshold, limit


def cosine_similarity(vec_a: list[float], vec_b: list[float]) -> float:
    """
    Cosine similarity clamped to [0, 1].

    Zero-norm vectors have no direction; their similarity is defined as 0.0.
    """
    dot = sum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = sum(a * a for a in vec_a) ** 0.5
    norm_b = sum(b * b for b in vec_b) ** 0.5
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return max(0.0, min(1.0, dot / (norm_a * norm_b)))


class MemoryStore(ABC):
    """
    Abstract interface for memory storage backends.

    Implementations: SQLite (embedded, local file), pgvector (PostgreSQL server)
    """

    @abstractmethod
    async def test_connection(self) -> None:
        """Run a trivial query against the backing store."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables, indexes and triggers if they do not exist."""
        pass

    @abstractmethod
    async def store_memory(
        self,
        input: StoreMemoryInput,
        embedding: list[float],
        model: str,
        provider: EmbeddingProviderType,
    ) -> MemoryWithEmbedding:
        """
        Store a memory and its embedding in one transaction.

        Args:
            input: Content and metadata
            embedding: Vector for the content
            model: Model that produced the vector
            provider: Provider whose table receives the vector

        Returns:
            The stored memory with its embedding metadata

        Raises:
            DimensionMismatchError: If the vector does not fit the provider table
            StorageError: If either insert fails (nothing is left behind)
        """
        pass

    @abstractmethod
    async def search_memories(
        self,
        input: SearchMemoryInput,
        query_embedding: list[float],
        default_provider: EmbeddingProviderType,
    ) -> list[SearchResult]:
        """
        Search one provider table by cosine similarity.

        Results are ordered by similarity, then importance, both descending.
        """
        pass

    @abstractmethod
    async def list_memories(self, filters: Optional[ListMemoriesInput] = None) -> list[Memory]:
        """
        List memories newest first.

        No page size is applied unless ``filters.limit`` is given.
        """
        pass

    @abstractmethod
    async def get_memory_by_id(self, memory_id: int) -> Optional[Memory]:
        """Get a memory, or None if it does not exist."""
        pass

    @abstractmethod
    async def get_memory_with_embedding(
        self,
        memory_id: int,
        provider: EmbeddingProviderType,
    ) -> Optional[MemoryWithEmbedding]:
        """Get a memory with its vector, or None if it was never embedded by ``provider``."""
        pass

    @abstractmethod
    async def delete_memory(self, memory_id: int) -> bool:
        """Delete a memory; its embeddings go with it. True if a row was removed."""
        pass

    @abstractmethod
    async def list_tags(self) -> list[str]:
        """Distinct tags across all memories, alphabetical."""
        pass

    @abstractmethod
    async def get_stats(self) -> MemoryStats:
        """Totals, average importance, tags, and per-provider embedding counts."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        pass
