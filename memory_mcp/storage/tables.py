"""
Provider-specific vector tables.

Every known embedding provider owns one vector table whose width is fixed
when the schema is defined. Table names only ever come from this mapping,
so nothing a client sends is interpolated into SQL text.
"""

from dataclasses import dataclass

from ..exceptions import DimensionMismatchError, StorageError
from ..models import EmbeddingProviderType

TABLE_PREFIX = "memory_embeddings_"


@dataclass(frozen=True)
class ProviderTable:
    """Static description of one provider's vector table."""
    provider: EmbeddingProviderType
    name: str
    dimensions: int

    @property
    def model_index(self) -> str:
        return f"idx_{self.provider.value}_model"

    @property
    def embedding_index(self) -> str:
        return f"idx_{self.provider.value}_embedding"


PROVIDER_TABLES: dict[EmbeddingProviderType, ProviderTable] = {
    EmbeddingProviderType.OPENAI: ProviderTable(
        provider=EmbeddingProviderType.OPENAI,
        name=TABLE_PREFIX + "openai",
        dimensions=1536,
    ),
    EmbeddingProviderType.OLLAMA: ProviderTable(
        provider=EmbeddingProviderType.OLLAMA,
        name=TABLE_PREFIX + "ollama",
        dimensions=768,  # nomic-embed-text
    ),
}


def provider_table(provider: EmbeddingProviderType | str) -> ProviderTable:
    """
    Look up the vector table for a provider.

    Raises:
        StorageError: If the provider has no table
    """
    try:
        return PROVIDER_TABLES[EmbeddingProviderType(provider)]
    except (KeyError, ValueError):
        raise StorageError(f"No embedding table for provider: {provider!r}")


def check_dimensions(table: ProviderTable, embedding: list[float]) -> None:
    """Reject vectors whose length differs from the table width."""
    if len(embedding) != table.dimensions:
        raise DimensionMismatchError(
            expected=table.dimensions,
            actual=len(embedding),
            table=table.name,
        )
