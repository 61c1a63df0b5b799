"""
Configuration module for Memory MCP.

Loads application settings from config.yaml and secrets from environment
variables. Environment variables take precedence over YAML values.
"""

import contextvars
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

# Context variable for tool-call logging
tool_context: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "tool_name", default=None
)


class ToolLogFilter(logging.Filter):
    """Filter to inject the executing tool name into log records."""
    def filter(self, record):
        tool_name = tool_context.get()
        if tool_name is not None:
            record.tool_info = f" [{tool_name}]"
        else:
            record.tool_info = ""
        return True


# Default config file path
CONFIG_FILE = Path(__file__).parent.parent / "config.yaml"

DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_EMBEDDING_MODEL = "nomic-embed-text"
DEFAULT_EMBEDDING_DIMENSIONS = 768
DEFAULT_SQLITE_PATH = "./memory_store/memories.db"

# Model and width used when the selected provider is configured without them
PROVIDER_DEFAULTS = {
    "openai": ("text-embedding-3-small", 1536),
    "ollama": (DEFAULT_EMBEDDING_MODEL, DEFAULT_EMBEDDING_DIMENSIONS),
}


def _load_yaml_config(config_file: Path) -> dict:
    """Load configuration from YAML file."""
    if config_file.exists():
        with open(config_file) as f:
            return yaml.safe_load(f) or {}
    return {}


def _get_yaml(yaml_config: dict, section: str, key: str, default=None):
    """Get a value from the YAML config."""
    return (yaml_config.get(section) or {}).get(key, default)


def _get_setting(
    yaml_config: dict,
    section: str,
    key: str,
    env_var: str,
    default: Any = None,
) -> Any:
    """Resolve a setting: environment first, then YAML, then the default."""
    env_value = os.getenv(env_var)
    if env_value:
        return env_value
    return _get_yaml(yaml_config, section, key, default)


@dataclass
class EmbeddingConfig:
    """Embedding provider selection and credentials."""
    provider: str = "ollama"
    # Secret from .env
    api_key: str = ""
    base_url: str = DEFAULT_OLLAMA_BASE_URL
    model: str = DEFAULT_EMBEDDING_MODEL
    dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS


@dataclass
class DatabaseConfig:
    """Backing store selection."""
    # Secret from .env (contains credentials). Empty means the embedded store.
    database_url: str = ""
    sqlite_path: str = DEFAULT_SQLITE_PATH

    @property
    def backend(self) -> str:
        return "postgresql" if self.database_url else "sqlite"


@dataclass
class AppConfig:
    """Application settings from YAML."""
    log_level: str = "INFO"
    # Page size the tool layer applies when listMemories omits a limit
    list_default_limit: int = 50


@dataclass
class Config:
    """Main configuration container."""
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    app: AppConfig = field(default_factory=AppConfig)
    config_file: Optional[Path] = None

    def setup_logging(self) -> logging.Logger:
        """Configure and return the application logger."""
        # Reset existing handlers to ensure clean configuration
        root = logging.getLogger()
        if root.handlers:
            for handler in list(root.handlers):
                root.removeHandler(handler)

        # basicConfig logs to stderr; stdout carries the MCP protocol
        logging.basicConfig(
            level=getattr(logging, self.app.log_level.upper(), logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s%(tool_info)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # Add filter to the handler created by basicConfig
        for handler in logging.getLogger().handlers:
            handler.addFilter(ToolLogFilter())

        return logging.getLogger("memory_mcp")

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of missing/invalid settings.

        Returns:
            List of validation error messages, empty if all valid.
        """
        errors = []

        provider = self.embedding.provider
        if provider == "openai" and not self.embedding.api_key:
            errors.append("OPENAI_API_KEY is required when using the openai embedding provider")
        elif provider == "ollama" and not self.embedding.base_url:
            errors.append("OLLAMA_BASE_URL is required when using the ollama embedding provider")
        elif provider not in ("openai", "ollama"):
            errors.append(f"Unknown embedding provider: {provider} (expected openai or ollama)")

        if self.embedding.dimensions <= 0:
            errors.append(f"EMBEDDING_DIMENSIONS must be positive, got {self.embedding.dimensions}")

        if self.app.list_default_limit <= 0:
            errors.append("tools.list_default_limit must be positive")

        return errors


def load_config(config_file: Optional[Path] = None, env_file: Optional[str] = None) -> Config:
    """
    Build a Config from config.yaml and the environment.

    Args:
        config_file: YAML file to read (defaults to config.yaml at the repo root)
        env_file: Optional .env file; the default lookup is used when omitted

    Returns:
        A fully resolved Config value
    """
    load_dotenv(env_file)

    config_file = config_file or CONFIG_FILE
    yaml_config = _load_yaml_config(config_file)

    provider = str(
        _get_setting(yaml_config, "embedding", "provider", "EMBEDDING_PROVIDER", "ollama")
    ).lower()
    default_model, default_dimensions = PROVIDER_DEFAULTS.get(
        provider, (DEFAULT_EMBEDDING_MODEL, DEFAULT_EMBEDDING_DIMENSIONS)
    )

    dimensions = _get_setting(
        yaml_config, "embedding", "dimensions", "EMBEDDING_DIMENSIONS", default_dimensions
    )
    try:
        dimensions = int(dimensions)
    except (TypeError, ValueError):
        dimensions = 0  # reported by validate()

    embedding = EmbeddingConfig(
        provider=provider,
        api_key=os.getenv("OPENAI_API_KEY", ""),
        base_url=_get_setting(
            yaml_config, "embedding", "ollama_base_url", "OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL
        ),
        model=_get_setting(yaml_config, "embedding", "model", "EMBEDDING_MODEL", default_model),
        dimensions=dimensions,
    )

    database = DatabaseConfig(
        database_url=os.getenv("DATABASE_URL", ""),
        sqlite_path=_get_setting(yaml_config, "database", "sqlite_path", "MEMORY_DB_PATH", DEFAULT_SQLITE_PATH),
    )

    app = AppConfig(
        log_level=_get_setting(yaml_config, "logging", "level", "LOG_LEVEL", "INFO"),
        list_default_limit=int(_get_yaml(yaml_config, "tools", "list_default_limit", 50)),
    )

    return Config(embedding=embedding, database=database, app=app, config_file=config_file)
