"""
Unit tests for memory_mcp/embeddings/openai_provider.py

Tests OpenAI embedding provider with mocked AsyncOpenAI client.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError

from memory_mcp.exceptions import ProviderError
from memory_mcp.models import EmbeddingProviderType


class TestOpenAIEmbeddingProvider:
    """Tests for OpenAIEmbeddingProvider class."""

    def test_init(self):
        """Test provider initialization."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="test-key", model="text-embedding-3-small")

        assert provider._api_key == "test-key"
        assert provider._model == "text-embedding-3-small"
        assert provider._client is None  # Lazy loaded

    def test_accessors_reflect_configuration(self):
        """Test identity, model and dimensions."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="test-key", model="text-embedding-ada-002")

        assert provider.identity is EmbeddingProviderType.OPENAI
        assert provider.model == "text-embedding-ada-002"
        assert provider.dimensions == 1536

    def test_get_client_creates_client(self, mock_openai):
        """Test that _get_client creates AsyncOpenAI client."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="test-key")
        client = provider._get_client()

        assert client is not None
        mock_openai.assert_called_once_with(api_key="test-key")

    def test_get_client_reuses_client(self, mock_openai):
        """Test that _get_client reuses existing client."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="test-key")
        client1 = provider._get_client()
        client2 = provider._get_client()

        assert client1 is client2
        mock_openai.assert_called_once()

    @pytest.mark.asyncio
    async def test_embed(self, mock_openai):
        """Test embedding a single text."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="test-key")
        embedding = await provider.embed("Prefer f-strings")

        assert len(embedding) == 1536
        mock_client = mock_openai.return_value
        mock_client.embeddings.create.assert_awaited_once_with(
            model="text-embedding-3-small",
            input="Prefer f-strings",
        )

    @pytest.mark.asyncio
    async def test_embed_requests_reduced_dimensions(self, mock_openai):
        """Test that the dimensions parameter is sent only below the model default."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(
            api_key="test-key", model="text-embedding-3-large", dimensions=1536
        )
        await provider.embed("text")

        call_kwargs = mock_openai.return_value.embeddings.create.call_args.kwargs
        assert call_kwargs["dimensions"] == 1536

    @pytest.mark.asyncio
    async def test_embed_api_error(self, mock_openai):
        """Test that API failures become ProviderError."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        mock_openai.return_value.embeddings.create = AsyncMock(
            side_effect=OpenAIError("rate limited")
        )
        provider = OpenAIEmbeddingProvider(api_key="test-key")

        with pytest.raises(ProviderError, match="rate limited"):
            await provider.embed("text")

    @pytest.mark.asyncio
    async def test_embed_missing_vector(self, mock_openai):
        """Test that an empty response becomes ProviderError."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        mock_openai.return_value.embeddings.create.return_value.data = []
        provider = OpenAIEmbeddingProvider(api_key="test-key")

        with pytest.raises(ProviderError):
            await provider.embed("text")

    @pytest.mark.asyncio
    async def test_embed_batch_sorts_by_index(self, mock_openai):
        """Test that batch results follow input order."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        second = MagicMock(index=1, embedding=[2.0])
        first = MagicMock(index=0, embedding=[1.0])
        mock_openai.return_value.embeddings.create.return_value.data = [second, first]
        provider = OpenAIEmbeddingProvider(api_key="test-key")

        embeddings = await provider.embed_batch(["a", "b"])

        assert embeddings == [[1.0], [2.0]]
        mock_openai.return_value.embeddings.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_embed_batch_empty(self, mock_openai):
        """Test that an empty batch makes no request."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="test-key")

        assert await provider.embed_batch([]) == []
        mock_openai.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_batch_count_mismatch(self, mock_openai):
        """Test that a short response is rejected."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="test-key")

        with pytest.raises(ProviderError, match="expected 2"):
            await provider.embed_batch(["a", "b"])

    @pytest.mark.asyncio
    async def test_close(self, mock_openai):
        """Test that close releases the client."""
        from memory_mcp.embeddings.openai_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="test-key")
        provider._get_client()

        await provider.close()

        mock_openai.return_value.close.assert_awaited_once()
        assert provider._client is None
