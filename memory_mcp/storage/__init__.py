"""
Memory storage backends.

PostgreSQL with pgvector when a connection string is configured, otherwise
an embedded SQLite file.
"""

import logging

from ..config import DatabaseConfig
from .base import MemoryStore
from .pgvector_store import PgVectorMemoryStore
from .sqlite_store import SQLiteMemoryStore
from .tables import PROVIDER_TABLES, ProviderTable, provider_table

logger = logging.getLogger("memory_mcp.storage")


def create_memory_store(config: DatabaseConfig) -> MemoryStore:
    """
    Create the memory store selected by the database configuration.

    Args:
        config: Database settings; a non-empty ``database_url`` selects PostgreSQL

    Returns:
        An uninitialized MemoryStore
    """
    if config.database_url:
        logger.info("Using PostgreSQL (pgvector) memory store")
        return PgVectorMemoryStore(connection_string=config.database_url)

    logger.info(f"Using embedded SQLite memory store at {config.sqlite_path}")
    return SQLiteMemoryStore(db_path=config.sqlite_path)


__all__ = [
    "MemoryStore",
    "PgVectorMemoryStore",
    "SQLiteMemoryStore",
    "ProviderTable",
    "PROVIDER_TABLES",
    "provider_table",
    "create_memory_store",
]
