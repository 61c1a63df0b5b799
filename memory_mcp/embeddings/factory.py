"""
Embedding Provider Factory.

Creates the appropriate embedding provider based on configuration.
"""

import logging

from ..config import EmbeddingConfig
from ..exceptions import ConfigurationError
from ..models import EmbeddingProviderType
from .base import EmbeddingProvider
from .ollama_provider import OllamaEmbeddingProvider
from .openai_provider import OpenAIEmbeddingProvider

logger = logging.getLogger("memory_mcp.embeddings.factory")


def create_embedding_provider(config: EmbeddingConfig) -> EmbeddingProvider:
    """
    Create an embedding provider based on the specified configuration.

    Args:
        config: Provider identity, credentials/base URL, model and dimensions.

    Returns:
        Configured EmbeddingProvider instance.

    Raises:
        ConfigurationError: If the provider is unknown or not properly configured.
    """
    try:
        provider = EmbeddingProviderType(config.provider)
    except ValueError:
        raise ConfigurationError(f"Unsupported embedding provider: {config.provider}")

    logger.info(f"Creating embedding provider: {provider.value}")

    if provider is EmbeddingProviderType.OPENAI:
        if not config.api_key:
            raise ConfigurationError("OpenAI API key is required when using the openai provider")
        return OpenAIEmbeddingProvider(
            api_key=config.api_key,
            model=config.model,
            dimensions=config.dimensions,
        )

    if not config.base_url:
        raise ConfigurationError("Ollama base URL is required when using the ollama provider")
    return OllamaEmbeddingProvider(
        base_url=config.base_url,
        model=config.model,
        dimensions=config.dimensions,
    )
