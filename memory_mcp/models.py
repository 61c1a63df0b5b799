"""
Data structures shared by the storage, embedding, and tool layers.

Field names are snake_case in Python; ``to_dict()`` produces the camelCase
shape returned to MCP clients.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class EmbeddingProviderType(str, Enum):
    """Known embedding providers. Each one owns a vector table."""

    OPENAI = "openai"
    OLLAMA = "ollama"


@dataclass
class Memory:
    """
    A stored coding preference or correction.

    This is the embedding-free projection of a row in the ``memories`` table.
    """
    id: int
    content: str
    context: Optional[str]
    tags: list[str]
    created_at: datetime
    updated_at: datetime
    importance_score: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "context": self.context,
            "tags": list(self.tags),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "importanceScore": self.importance_score,
        }


@dataclass
class MemoryWithEmbedding(Memory):
    """A memory joined with its row from one provider's vector table."""
    embedding: list[float] = field(default_factory=list)
    embedding_model: str = ""
    embedding_provider: EmbeddingProviderType = EmbeddingProviderType.OLLAMA

    def to_dict(self) -> dict[str, Any]:
        # The raw vector is not part of the boundary shape
        data = super().to_dict()
        data["embeddingModel"] = self.embedding_model
        data["embeddingProvider"] = self.embedding_provider.value
        return data


@dataclass
class SearchResult:
    """A search hit; the score is computed per query and never stored."""
    memory: MemoryWithEmbedding
    similarity_score: float  # 0-1, higher is more similar

    def to_dict(self) -> dict[str, Any]:
        return {
            "memory": self.memory.to_dict(),
            "similarityScore": self.similarity_score,
        }


@dataclass
class MemoryStats:
    """Aggregate statistics over the whole store."""
    total_memories: int
    avg_importance: float
    unique_tags: list[str]
    embedding_counts: dict[EmbeddingProviderType, int]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "totalMemories": self.total_memories,
            "avgImportance": self.avg_importance,
            "uniqueTags": list(self.unique_tags),
        }
        for provider, count in self.embedding_counts.items():
            data[f"{provider.value}Embeddings"] = count
        return data


@dataclass
class StoreMemoryInput:
    """Parameters for creating a memory."""
    content: str
    context: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    importance_score: Optional[int] = None


@dataclass
class SearchMemoryInput:
    """Parameters for a semantic search."""
    query: str
    limit: Optional[int] = None
    similarity_threshold: Optional[float] = None
    tags: list[str] = field(default_factory=list)
    provider: Optional[EmbeddingProviderType] = None
    model: Optional[str] = None


@dataclass
class ListMemoriesInput:
    """Filters for listing memories. Every filter is optional and combinable."""
    limit: Optional[int] = None
    offset: Optional[int] = None
    tags: list[str] = field(default_factory=list)
    min_importance: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    provider: Optional[EmbeddingProviderType] = None
