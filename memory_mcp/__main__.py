"""Allow ``python -m memory_mcp``."""

from .server import main

main()
