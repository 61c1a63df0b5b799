"""
Memory MCP - Semantic memory for coding preferences and corrections

This package stores short "memories" alongside vector embeddings from a
pluggable provider (OpenAI or Ollama) and serves them back by semantic
similarity over the Model Context Protocol.
"""

__version__ = "0.1.0"
