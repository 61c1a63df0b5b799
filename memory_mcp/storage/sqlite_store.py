"""
SQLite Memory Store Implementation.

SQLite is the embedded backend, used when no PostgreSQL URL is configured:
- No server required
- Everything lives in a single local file
- Foreign keys with ON DELETE CASCADE keep embeddings in step with memories
- Cosine similarity is computed by a SQL function registered on the connection

Vectors are stored as JSON arrays. Each provider table carries a CHECK
constraint on the array length, mirroring pgvector's fixed-width columns.
There is no ANN index here; searches scan the provider table.
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional

from ..exceptions import StorageError
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
from .base import DEFAULT_IMPORTANCE, MemoryStore, cosine_similarity, search_defaults
from .tables import PROVIDER_TABLES, check_dimensions, provider_table

logger = logging.getLogger("memory_mcp.storage.sqlite")

MEMORY_COLUMNS = """
    m.id, m.content, m.context, m.tags, m.created_at, m.updated_at, m.importance_score
"""


def _timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO string, so text comparison matches time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _now() -> str:
    return _timestamp(datetime.now(timezone.utc))


@lru_cache(maxsize=1)
def _parse_query_vector(text: str) -> tuple[float, ...]:
    # One query vector is compared against every row of a scan
    return tuple(json.loads(text))


def _sql_cosine_similarity(stored: str, query: str) -> float:
    """SQL function: similarity between two JSON-encoded vectors."""
    return cosine_similarity(json.loads(stored), _parse_query_vector(query))


class SQLiteMemoryStore(MemoryStore):
    """
    SQLite implementation of the memory store.

    Holds a single connection for its lifetime; there is no pool.
    """

    def __init__(self, db_path: str = "./memory_store/memories.db"):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        logger.info(f"SQLiteMemoryStore configured with database: {db_path}")

    def _connect(self) -> sqlite3.Connection:
        """Open the connection once and register the similarity function."""
        if self._conn is None:
            try:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self.db_path)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys = ON")
                conn.create_function(
                    "cosine_similarity", 2, _sql_cosine_similarity, deterministic=True
                )
            except (sqlite3.Error, OSError) as e:
                raise StorageError(f"Failed to open SQLite database {self.db_path}: {e}") from e
            self._conn = conn
        return self._conn

    def _ensure_initialized(self) -> sqlite3.Connection:
        """Ensure the store is initialized."""
        if self._conn is None:
            raise RuntimeError("SQLiteMemoryStore not initialized. Call initialize() first.")
        return self._conn

    async def test_connection(self) -> None:
        conn = self._connect()
        try:
            conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"SQLite connection test failed: {e}") from e

    async def initialize(self) -> None:
        """Create the schema if needed."""
        conn = self._connect()

        statements = [
            """
            CREATE TABLE IF NOT EXISTS memories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                content TEXT NOT NULL,
                context TEXT,
                tags TEXT NOT NULL DEFAULT '[]',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                importance_score INTEGER NOT NULL DEFAULT 1
                    CHECK (importance_score >= 1 AND importance_score <= 5)
            )
            """,
            """
            CREATE INDEX IF NOT EXISTS idx_memories_created_at
            ON memories(created_at DESC)
            """,
            """
            CREATE INDEX IF NOT EXISTS idx_memories_importance
            ON memories(importance_score DESC)
            """,
            # Refresh updated_at on any mutation that does not set it itself
            """
            CREATE TRIGGER IF NOT EXISTS update_memories_updated_at
            AFTER UPDATE ON memories
            FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
            BEGIN
                UPDATE memories
                SET updated_at = strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')
                WHERE id = NEW.id;
            END
            """,
        ]

        for table in PROVIDER_TABLES.values():
            statements.append(f"""
                CREATE TABLE IF NOT EXISTS {table.name} (
                    memory_id INTEGER PRIMARY KEY
                        REFERENCES memories(id) ON DELETE CASCADE,
                    embedding TEXT NOT NULL
                        CHECK (json_array_length(embedding) = {table.dimensions}),
                    model TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            statements.append(f"""
                CREATE INDEX IF NOT EXISTS {table.model_index}
                ON {table.name}(model)
            """)

        try:
            with conn:
                for statement in statements:
                    conn.execute(statement)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize SQLite schema: {e}") from e

        count = conn.execute("SELECT COUNT(*) FROM memories").fetchone()[0]
        logger.info(f"SQLite store initialized with {count} existing memories")

    def _row_to_memory(self, row: sqlite3.Row) -> Memory:
        """Convert a database row to a Memory."""
        return Memory(
            id=row["id"],
            content=row["content"],
            context=row["context"],
            tags=json.loads(row["tags"]) if row["tags"] else [],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            importance_score=row["importance_score"],
        )

    def _row_to_memory_with_embedding(
        self,
        row: sqlite3.Row,
        provider: EmbeddingProviderType,
    ) -> MemoryWithEmbedding:
        memory = self._row_to_memory(row)
        return MemoryWithEmbedding(
            id=memory.id,
            content=memory.content,
            context=memory.context,
            tags=memory.tags,
            created_at=memory.created_at,
            updated_at=memory.updated_at,
            importance_score=memory.importance_score,
            embedding=json.loads(row["embedding"]),
            embedding_model=row["model"],
            embedding_provider=provider,
        )

    async def store_memory(
        self,
        input: StoreMemoryInput,
        embedding: list[float],
        model: str,
        provider: EmbeddingProviderType,
    ) -> MemoryWithEmbedding:
        """Store a memory and its embedding atomically."""
        conn = self._ensure_initialized()
        table = provider_table(provider)
        check_dimensions(table, embedding)

        tags = list(input.tags or [])
        importance = input.importance_score if input.importance_score is not None else DEFAULT_IMPORTANCE
        now = _now()

        try:
            # Commits on success, rolls back both inserts on failure
            with conn:
                cursor = conn.execute(
                    """
                    INSERT INTO memories
                    (content, context, tags, created_at, updated_at, importance_score)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (input.content, input.context, json.dumps(tags), now, now, importance),
                )
                memory_id = cursor.lastrowid

                conn.execute(
                    f"""
                    INSERT INTO {table.name} (memory_id, embedding, model, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (memory_id, json.dumps(embedding), model, now),
                )
        except sqlite3.Error as e:
            logger.error(f"Failed to store memory: {e}")
            raise StorageError(f"Failed to store memory: {e}") from e

        logger.info(f"Stored memory {memory_id} in {table.name}")

        created = datetime.fromisoformat(now)
        return MemoryWithEmbedding(
            id=memory_id,
            content=input.content,
            context=input.context,
            tags=tags,
            created_at=created,
            updated_at=created,
            importance_score=importance,
            embedding=list(embedding),
            embedding_model=model,
            embedding_provider=table.provider,
        )

    async def search_memories(
        self,
        input: SearchMemoryInput,
        query_embedding: list[float],
        default_provider: EmbeddingProviderType,
    ) -> list[SearchResult]:
        """Search for similar memories using cosine similarity."""
        conn = self._ensure_initialized()
        table = provider_table(input.provider or default_provider)
        check_dimensions(table, query_embedding)
        threshold, limit = search_defaults(input)

        conditions = []
        params: list = [json.dumps(query_embedding)]

        if input.model:
            conditions.append("e.model = ?")
            params.append(input.model)

        if input.tags:
            conditions.append(
                "EXISTS (SELECT 1 FROM json_each(m.tags) AS t "
                "WHERE t.value IN (SELECT value FROM json_each(?)))"
            )
            params.append(json.dumps(list(input.tags)))

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        params.extend([threshold, limit])

        query = f"""
            SELECT * FROM (
                SELECT {MEMORY_COLUMNS}, e.embedding, e.model,
                    cosine_similarity(e.embedding, ?) AS similarity_score
                FROM memories m
                JOIN {table.name} e ON m.id = e.memory_id
                {where}
            )
            WHERE similarity_score >= ?
            ORDER BY similarity_score DESC, importance_score DESC
            LIMIT ?
        """

        try:
            rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Search failed: {e}") from e

        return [
            SearchResult(
                memory=self._row_to_memory_with_embedding(row, table.provider),
                similarity_score=float(row["similarity_score"]),
            )
            for row in rows
        ]

    async def list_memories(self, filters: Optional[ListMemoriesInput] = None) -> list[Memory]:
        """List memories with optional filtering, newest first."""
        conn = self._ensure_initialized()
        filters = filters or ListMemoriesInput()

        conditions = []
        params: list = []

        if filters.tags:
            conditions.append(
                "EXISTS (SELECT 1 FROM json_each(m.tags) AS t "
                "WHERE t.value IN (SELECT value FROM json_each(?)))"
            )
            params.append(json.dumps(list(filters.tags)))

        if filters.min_importance is not None:
            conditions.append("m.importance_score >= ?")
            params.append(filters.min_importance)

        if filters.start_date is not None:
            conditions.append("m.created_at >= ?")
            params.append(_timestamp(filters.start_date))

        if filters.end_date is not None:
            conditions.append("m.created_at <= ?")
            params.append(_timestamp(filters.end_date))

        if filters.provider is not None:
            table = provider_table(filters.provider)
            conditions.append(f"EXISTS (SELECT 1 FROM {table.name} e WHERE e.memory_id = m.id)")

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        query = f"""
            SELECT {MEMORY_COLUMNS}
            FROM memories m
            {where}
            ORDER BY m.created_at DESC, m.id DESC
        """

        if filters.limit is not None or filters.offset is not None:
            # SQLite needs a LIMIT clause for OFFSET; -1 means unbounded
            query += " LIMIT ? OFFSET ?"
            params.append(filters.limit if filters.limit is not None else -1)
            params.append(filters.offset or 0)

        try:
            rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Listing memories failed: {e}") from e

        return [self._row_to_memory(row) for row in rows]

    async def get_memory_by_id(self, memory_id: int) -> Optional[Memory]:
        conn = self._ensure_initialized()
        try:
            row = conn.execute(
                f"SELECT {MEMORY_COLUMNS} FROM memories m WHERE m.id = ?",
                (memory_id,),
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Fetching memory {memory_id} failed: {e}") from e

        if row:
            return self._row_to_memory(row)
        return None

    async def get_memory_with_embedding(
        self,
        memory_id: int,
        provider: EmbeddingProviderType,
    ) -> Optional[MemoryWithEmbedding]:
        conn = self._ensure_initialized()
        table = provider_table(provider)
        try:
            row = conn.execute(
                f"""
                SELECT {MEMORY_COLUMNS}, e.embedding, e.model
                FROM memories m
                JOIN {table.name} e ON m.id = e.memory_id
                WHERE m.id = ?
                """,
                (memory_id,),
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Fetching memory {memory_id} failed: {e}") from e

        if row:
            return self._row_to_memory_with_embedding(row, table.provider)
        return None

    async def delete_memory(self, memory_id: int) -> bool:
        """Delete a memory; the foreign keys cascade to every provider table."""
        conn = self._ensure_initialized()
        try:
            with conn:
                cursor = conn.execute("DELETE FROM memories WHERE id = ?", (memory_id,))
        except sqlite3.Error as e:
            raise StorageError(f"Deleting memory {memory_id} failed: {e}") from e

        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Deleted memory {memory_id}")
        return deleted

    async def list_tags(self) -> list[str]:
        conn = self._ensure_initialized()
        try:
            rows = conn.execute("""
                SELECT DISTINCT t.value AS tag
                FROM memories m, json_each(m.tags) AS t
                ORDER BY tag
            """).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Listing tags failed: {e}") from e

        return [row["tag"] for row in rows]

    async def get_stats(self) -> MemoryStats:
        conn = self._ensure_initialized()
        try:
            totals = conn.execute("""
                SELECT COUNT(*) AS total_memories, AVG(importance_score) AS avg_importance
                FROM memories
            """).fetchone()

            embedding_counts = {}
            for provider, table in PROVIDER_TABLES.items():
                row = conn.execute(f"SELECT COUNT(*) AS count FROM {table.name}").fetchone()
                embedding_counts[provider] = row["count"]
        except sqlite3.Error as e:
            raise StorageError(f"Computing stats failed: {e}") from e

        return MemoryStats(
            total_memories=totals["total_memories"],
            avg_importance=float(totals["avg_importance"] or 0.0),
            unique_tags=await self.list_tags(),
            embedding_counts=embedding_counts,
        )

    async def close(self) -> None:
        """Clean up resources."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        logger.info("SQLite connection closed")
