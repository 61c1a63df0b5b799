"""
Test fixtures and sample data for Memory MCP tests.
"""

from datetime import datetime, timezone

from memory_mcp.embeddings.base import EmbeddingProvider
from memory_mcp.models import (
    EmbeddingProviderType,
    Memory,
    MemoryWithEmbedding,
    StoreMemoryInput,
)
from memory_mcp.storage.tables import PROVIDER_TABLES


def make_vector(values: list[float], dimensions: int = 768) -> list[float]:
    """Pad ``values`` with zeros up to ``dimensions``."""
    return list(values) + [0.0] * (dimensions - len(values))


def unit_vector(index: int, dimensions: int = 768) -> list[float]:
    """A vector pointing along a single axis."""
    vector = [0.0] * dimensions
    vector[index] = 1.0
    return vector


def make_store_input(
    content: str = "Prefer f-strings over str.format()",
    context: str | None = "python style",
    tags: list[str] | None = None,
    importance_score: int | None = None,
) -> StoreMemoryInput:
    """Create a sample StoreMemoryInput."""
    return StoreMemoryInput(
        content=content,
        context=context,
        tags=tags if tags is not None else ["python", "style"],
        importance_score=importance_score,
    )


def make_memory(
    id: int = 1,
    content: str = "Prefer f-strings over str.format()",
    tags: list[str] | None = None,
    importance_score: int = 1,
    created_at: datetime | None = None,
) -> Memory:
    """Create a sample Memory."""
    created_at = created_at or datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
    return Memory(
        id=id,
        content=content,
        context=None,
        tags=tags if tags is not None else ["python"],
        created_at=created_at,
        updated_at=created_at,
        importance_score=importance_score,
    )


def make_memory_with_embedding(
    id: int = 1,
    content: str = "Prefer f-strings over str.format()",
    provider: EmbeddingProviderType = EmbeddingProviderType.OLLAMA,
    model: str = "nomic-embed-text",
) -> MemoryWithEmbedding:
    """Create a sample MemoryWithEmbedding with a unit vector of the provider's width."""
    memory = make_memory(id=id, content=content)
    return MemoryWithEmbedding(
        id=memory.id,
        content=memory.content,
        context=memory.context,
        tags=memory.tags,
        created_at=memory.created_at,
        updated_at=memory.updated_at,
        importance_score=memory.importance_score,
        embedding=unit_vector(0, PROVIDER_TABLES[provider].dimensions),
        embedding_model=model,
        embedding_provider=provider,
    )


class FakeEmbeddingProvider(EmbeddingProvider):
    """
    Deterministic in-process provider.

    Texts registered in ``vectors`` embed to that vector; anything else
    embeds to the first axis.
    """

    def __init__(
        self,
        identity: EmbeddingProviderType = EmbeddingProviderType.OLLAMA,
        model: str = "nomic-embed-text",
        dimensions: int = 768,
        vectors: dict[str, list[float]] | None = None,
    ):
        self._identity = identity
        self._model = model
        self._dimensions = dimensions
        self.vectors = vectors or {}
        self.calls: list[str] = []
        self.closed = False

    @property
    def identity(self) -> EmbeddingProviderType:
        return self._identity

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return list(self.vectors.get(text, unit_vector(0, self._dimensions)))

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(text) for text in texts]

    async def close(self) -> None:
        self.closed = True
