"""
Tool definitions for the memory MCP server.

This module provides the tools an MCP client can call to store, search,
list and delete memories, and to inspect the store.
"""

import logging
from typing import Any

from .config import tool_context
from .exceptions import MemoryMCPError
from .memory_service import MemoryService
from .models import EmbeddingProviderType
from .validation import (
    validate_delete_memory_args,
    validate_list_memories_args,
    validate_search_memories_args,
    validate_store_memory_args,
)

logger = logging.getLogger("memory_mcp.tools")

PROVIDER_VALUES = [p.value for p in EmbeddingProviderType]

TAGS_SCHEMA = {
    "type": "array",
    "items": {"type": "string"},
    "description": "Tags for categorization (e.g. ['python', 'style'])",
}


class ToolRegistry:
    """
    Registry of tools exposed to MCP clients.
    """

    def __init__(self, service: MemoryService, list_default_limit: int = 50):
        """
        Initialize the tool registry.

        Args:
            service: Memory service backing every tool
            list_default_limit: Page size for listMemories when the caller sends no limit
        """
        self.service = service
        self.list_default_limit = list_default_limit
        self._handlers = {
            "storeMemory": self._store_memory,
            "searchMemories": self._search_memories,
            "listMemories": self._list_memories,
            "deleteMemory": self._delete_memory,
            "listTags": self._list_tags,
            "getMemoryStats": self._get_memory_stats,
        }

    def get_definitions(self) -> list[dict[str, Any]]:
        """
        Get the JSON schema definitions for all available tools.
        """
        return [
            {
                "name": "storeMemory",
                "description": "Store a coding preference, correction, or fact so it can be recalled later by meaning.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "content": {
                            "type": "string",
                            "description": "The preference or fact to remember",
                        },
                        "context": {
                            "type": "string",
                            "description": "Optional free-form context (where it applies, why)",
                        },
                        "tags": TAGS_SCHEMA,
                        "importanceScore": {
                            "type": "integer",
                            "minimum": 1,
                            "maximum": 5,
                            "description": "Importance from 1 (default) to 5",
                        },
                    },
                    "required": ["content"],
                },
            },
            {
                "name": "searchMemories",
                "description": "Find stored memories semantically similar to a query.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "What to look for",
                        },
                        "limit": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "Maximum results (default 10)",
                        },
                        "similarityThreshold": {
                            "type": "number",
                            "description": "Minimum similarity from 0 to 1 (default 0.7)",
                        },
                        "tags": TAGS_SCHEMA,
                        "providerIdentity": {
                            "type": "string",
                            "enum": PROVIDER_VALUES,
                            "description": "Which provider's embeddings to search (default: the active one)",
                        },
                        "model": {
                            "type": "string",
                            "description": "Only match embeddings made by this model",
                        },
                    },
                    "required": ["query"],
                },
            },
            {
                "name": "listMemories",
                "description": "List stored memories, newest first, with optional filters.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "limit": {
                            "type": "integer",
                            "minimum": 1,
                            "description": f"Page size (default {self.list_default_limit})",
                        },
                        "offset": {
                            "type": "integer",
                            "minimum": 0,
                            "description": "Number of memories to skip",
                        },
                        "tags": TAGS_SCHEMA,
                        "minImportance": {
                            "type": "integer",
                            "minimum": 1,
                            "maximum": 5,
                            "description": "Only memories at least this important",
                        },
                        "startDate": {
                            "type": "string",
                            "description": "ISO-8601 lower bound on creation time",
                        },
                        "endDate": {
                            "type": "string",
                            "description": "ISO-8601 upper bound on creation time",
                        },
                        "providerIdentity": {
                            "type": "string",
                            "enum": PROVIDER_VALUES,
                            "description": "Only memories embedded by this provider",
                        },
                    },
                },
            },
            {
                "name": "deleteMemory",
                "description": "Delete a memory and all of its embeddings.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "id": {
                            "type": "integer",
                            "description": "ID of the memory to delete",
                        },
                    },
                    "required": ["id"],
                },
            },
            {
                "name": "listTags",
                "description": "List every distinct tag in use, alphabetically.",
                "inputSchema": {"type": "object", "properties": {}},
            },
            {
                "name": "getMemoryStats",
                "description": "Get memory counts, average importance, tags, and the active embedding provider.",
                "inputSchema": {"type": "object", "properties": {}},
            },
        ]

    async def execute(self, tool_name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
        """
        Execute a tool by name with arguments.

        Returns a response dict with ``success`` set; failures never raise.
        """
        token = tool_context.set(tool_name)
        try:
            logger.info(f"Executing tool: {tool_name} with args: {arguments}")

            handler = self._handlers.get(tool_name)
            if handler is None:
                logger.warning(f"Unknown tool requested: {tool_name}")
                return self._failure("UnknownTool", f"Tool {tool_name} not found")

            try:
                return await handler(arguments)
            except MemoryMCPError as e:
                logger.error(f"Error executing tool {tool_name}: {e}")
                return self._failure(type(e).__name__, str(e))
            except Exception as e:
                logger.exception(f"Unexpected error executing tool {tool_name}: {e}")
                return self._failure("InternalError", str(e))
        finally:
            tool_context.reset(token)

    @staticmethod
    def _failure(error_type: str, message: str) -> dict[str, Any]:
        return {"success": False, "error": {"type": error_type, "message": message}}

    async def _store_memory(self, arguments) -> dict[str, Any]:
        memory = await self.service.store_memory(validate_store_memory_args(arguments))
        return {"success": True, "memory": memory.to_dict()}

    async def _search_memories(self, arguments) -> dict[str, Any]:
        results = await self.service.search_memories(validate_search_memories_args(arguments))
        return {
            "success": True,
            "results": [r.to_dict() for r in results],
            "totalResults": len(results),
        }

    async def _list_memories(self, arguments) -> dict[str, Any]:
        filters = validate_list_memories_args(arguments)
        if filters.limit is None:
            filters.limit = self.list_default_limit

        memories = await self.service.list_memories(filters)
        return {
            "success": True,
            "memories": [m.to_dict() for m in memories],
            "totalResults": len(memories),
        }

    async def _delete_memory(self, arguments) -> dict[str, Any]:
        memory_id = validate_delete_memory_args(arguments)
        if await self.service.delete_memory(memory_id):
            return {"success": True, "message": f"Memory {memory_id} deleted successfully"}
        return {"success": False, "message": f"Memory {memory_id} not found"}

    async def _list_tags(self, arguments) -> dict[str, Any]:
        tags = await self.service.list_tags()
        return {"success": True, "tags": tags, "totalTags": len(tags)}

    async def _get_memory_stats(self, arguments) -> dict[str, Any]:
        return {"success": True, "stats": await self.service.get_stats()}
