"""
Memory Service - Orchestrates embedding and storage.

This is the high-level interface that the tool layer uses.
It handles:
- Embedding content before storing it
- Embedding queries before searching
- Routing reads to the active provider's vector table
- Reporting statistics alongside the active provider configuration
"""

import logging
from typing import Any, Optional

from .embeddings import EmbeddingProvider
from .models import (
    EmbeddingProviderType,
    ListMemoriesInput,
    Memory,
    MemoryWithEmbedding,
    SearchMemoryInput,
    SearchResult,
    StoreMemoryInput,
)
from .storage import MemoryStore

logger = logging.getLogger("memory_mcp.service")


class MemoryService:
    """
    High-level memory management for the MCP tools.

    Owns one store and one embedding provider for the process lifetime.
    """

    def __init__(self, store: MemoryStore, provider: EmbeddingProvider):
        self.store = store
        self.provider = provider
        logger.info(
            f"MemoryService created with {provider.identity.value} "
            f"({provider.model}, {provider.dimensions} dims)"
        )

    async def initialize(self) -> None:
        """Verify the store is reachable, then create its schema."""
        await self.store.test_connection()
        await self.store.initialize()
        logger.info("MemoryService initialized")

    async def store_memory(self, input: StoreMemoryInput) -> MemoryWithEmbedding:
        """
        Embed the content and store it with the active provider.

        Args:
            input: Content and metadata

        Returns:
            The stored memory
        """
        embedding = await self.provider.embed(input.content)
        memory = await self.store.store_memory(
            input,
            embedding,
            model=self.provider.model,
            provider=self.provider.identity,
        )
        logger.info(f"Stored memory {memory.id} with {len(embedding)}-dim embedding")
        return memory

    async def search_memories(self, input: SearchMemoryInput) -> list[SearchResult]:
        """
        Embed the query and search the selected provider table.

        The query is always embedded by the active provider, so searching
        another provider's table only works when the widths agree.
        """
        query_embedding = await self.provider.embed(input.query)
        results = await self.store.search_memories(
            input,
            query_embedding,
            default_provider=self.provider.identity,
        )

        logger.info(f"Found {len(results)} matching memories")
        for r in results:
            logger.debug(f"  - memory {r.memory.id}: similarity={r.similarity_score:.3f}")

        return results

    async def list_memories(self, input: Optional[ListMemoriesInput] = None) -> list[Memory]:
        return await self.store.list_memories(input)

    async def get_memory(
        self,
        memory_id: int,
        provider: Optional[EmbeddingProviderType] = None,
    ) -> Optional[MemoryWithEmbedding]:
        """Get a memory with its vector from ``provider`` (the active one by default)."""
        return await self.store.get_memory_with_embedding(
            memory_id, provider or self.provider.identity
        )

    async def delete_memory(self, memory_id: int) -> bool:
        return await self.store.delete_memory(memory_id)

    async def list_tags(self) -> list[str]:
        return await self.store.list_tags()

    async def get_stats(self) -> dict[str, Any]:
        """Store statistics plus the active provider configuration."""
        stats = (await self.store.get_stats()).to_dict()
        stats["currentProvider"] = self.provider.identity.value
        stats["currentModel"] = self.provider.model
        stats["currentDimensions"] = self.provider.dimensions
        return stats

    async def close(self) -> None:
        """Clean up resources."""
        await self.provider.close()
        await self.store.close()
        logger.info("MemoryService closed")
