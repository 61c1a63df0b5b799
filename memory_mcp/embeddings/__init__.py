"""
Embedding Provider Interface Module.

Provides a unified interface for generating vectors with different
embedding services (OpenAI, Ollama).
"""

from .base import EmbeddingProvider
from .factory import create_embedding_provider
from .ollama_provider import OllamaEmbeddingProvider
from .openai_provider import OpenAIEmbeddingProvider

__all__ = [
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "create_embedding_provider",
]
