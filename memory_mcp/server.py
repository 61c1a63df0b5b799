"""
MCP server entry point.

Wires configuration, the embedding provider, the memory store and the tool
registry together, then serves the tools over stdio:
1. Load config.yaml and .env
2. Configure logging (stderr; stdout carries the protocol)
3. Validate configuration
4. Connect to the store and create the schema
5. Serve until the client disconnects, then clean up
"""

import asyncio
import json
import logging
import sys
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from . import __version__
from .config import Config, load_config
from .embeddings import create_embedding_provider
from .exceptions import MemoryMCPError
from .memory_service import MemoryService
from .storage import create_memory_store
from .tools import ToolRegistry

logger = logging.getLogger("memory_mcp.server")

SERVER_NAME = "memory-mcp"


def create_server(registry: ToolRegistry) -> Server:
    """Build an MCP server whose tools are served by ``registry``."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        """MCP handler: list available tools."""
        return [
            Tool(
                name=definition["name"],
                description=definition["description"],
                inputSchema=definition["inputSchema"],
            )
            for definition in registry.get_definitions()
        ]

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: Optional[dict[str, Any]] = None
    ) -> CallToolResult:
        """MCP handler: execute a tool. Failed calls are flagged with isError."""
        result = await registry.execute(name, arguments or {})
        return to_call_tool_result(result)

    return server


def to_call_tool_result(result: dict[str, Any]) -> CallToolResult:
    """Wrap a tool response as JSON text, flagging ``success: false`` as an error."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(result, default=str, indent=2))],
        isError=not result.get("success", False),
    )


def build_service(config: Config) -> MemoryService:
    """Create the provider and store selected by ``config``."""
    provider = create_embedding_provider(config.embedding)
    store = create_memory_store(config.database)
    return MemoryService(store=store, provider=provider)


async def run_server(config: Config) -> None:
    """Initialize the memory service and serve MCP over stdio."""
    service = build_service(config)
    try:
        await service.initialize()

        registry = ToolRegistry(service, list_default_limit=config.app.list_default_limit)
        server = create_server(registry)

        logger.info(
            f"Serving {len(registry.get_definitions())} tools "
            f"({config.embedding.provider}, {config.database.backend} store)"
        )
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await service.close()


def main():
    """Entry point for the application."""
    config = load_config()
    config.setup_logging()

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        sys.exit(1)

    try:
        asyncio.run(run_server(config))
        sys.exit(0)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(130)
    except MemoryMCPError as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
