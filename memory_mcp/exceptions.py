"""Custom exception classes for Memory MCP."""


class MemoryMCPError(Exception):
    """Base class for every error surfaced to the tool boundary."""


class ValidationError(MemoryMCPError):
    """Tool arguments are missing or malformed.

    Raised before anything reaches the embedding provider or storage.
    """


class ConfigurationError(MemoryMCPError):
    """The configured provider is unknown or lacks a required credential/URL."""


class ProviderError(MemoryMCPError):
    """The remote embedding call failed or returned an unexpected shape."""


class StorageError(MemoryMCPError):
    """A query or transaction against the backing store failed."""


class DimensionMismatchError(StorageError):
    """A vector's length does not match the width of its provider table.

    Attributes:
        expected: Width of the provider table
        actual: Length of the offending vector
        table: Name of the provider table
    """

    def __init__(self, expected: int, actual: int, table: str):
        super().__init__(
            f"Embedding has {actual} dimensions but {table} stores {expected}"
        )
        self.expected = expected
        self.actual = actual
        self.table = table
