"""
Unit tests for memory_mcp/validation.py
"""

from datetime import datetime, timezone

import pytest

from memory_mcp.exceptions import ValidationError
from memory_mcp.models import EmbeddingProviderType
from memory_mcp.validation import (
    MAX_INTEGER,
    validate_delete_memory_args,
    validate_list_memories_args,
    validate_search_memories_args,
    validate_store_memory_args,
)


class TestStoreMemoryArgs:
    """Tests for storeMemory validation."""

    def test_full_arguments(self):
        """Test that every field is converted."""
        result = validate_store_memory_args({
            "content": "Prefer f-strings",
            "context": "python",
            "tags": ["python", "style"],
            "importanceScore": 4,
        })

        assert result.content == "Prefer f-strings"
        assert result.context == "python"
        assert result.tags == ["python", "style"]
        assert result.importance_score == 4

    def test_minimal_arguments(self):
        """Test defaults for optional fields."""
        result = validate_store_memory_args({"content": "x"})

        assert result.context is None
        assert result.tags == []
        assert result.importance_score is None

    @pytest.mark.parametrize("args", [
        {},
        {"content": ""},
        {"content": "   "},
        {"content": 42},
        {"content": "x", "context": 5},
        {"content": "x", "tags": "python"},
        {"content": "x", "tags": ["python", 3]},
        {"content": "x", "importanceScore": 0},
        {"content": "x", "importanceScore": 6},
        {"content": "x", "importanceScore": 2.5},
        {"content": "x", "importanceScore": True},
        {"content": "x", "importanceScore": "3"},
    ])
    def test_rejects_malformed(self, args):
        """Test that malformed arguments raise ValidationError."""
        with pytest.raises(ValidationError):
            validate_store_memory_args(args)

    def test_rejects_non_mapping(self):
        """Test that arguments must be an object."""
        with pytest.raises(ValidationError, match="object"):
            validate_store_memory_args(["content"])

    def test_integral_float_importance_accepted(self):
        """Test that 3.0 is read as 3."""
        assert validate_store_memory_args({"content": "x", "importanceScore": 3.0}).importance_score == 3


class TestSearchMemoriesArgs:
    """Tests for searchMemories validation."""

    def test_full_arguments(self):
        """Test that every field is converted."""
        result = validate_search_memories_args({
            "query": "string formatting",
            "limit": 5,
            "similarityThreshold": 0.5,
            "tags": ["python"],
            "providerIdentity": "openai",
            "model": "text-embedding-3-small",
        })

        assert result.query == "string formatting"
        assert result.limit == 5
        assert result.similarity_threshold == 0.5
        assert result.tags == ["python"]
        assert result.provider is EmbeddingProviderType.OPENAI
        assert result.model == "text-embedding-3-small"

    def test_threshold_zero_is_kept(self):
        """Test that 0 is not confused with 'absent'."""
        result = validate_search_memories_args({"query": "q", "similarityThreshold": 0})

        assert result.similarity_threshold == 0.0

    def test_threshold_above_one_allowed(self):
        """Test that thresholds are not range-checked."""
        result = validate_search_memories_args({"query": "q", "similarityThreshold": 1.1})

        assert result.similarity_threshold == 1.1

    def test_aliases_accepted(self):
        """Test the older argument names."""
        result = validate_search_memories_args({
            "query": "q",
            "embeddingProvider": "ollama",
            "embeddingModel": "nomic-embed-text",
        })

        assert result.provider is EmbeddingProviderType.OLLAMA
        assert result.model == "nomic-embed-text"

    @pytest.mark.parametrize("args", [
        {},
        {"query": 1},
        {"query": "q", "limit": 0},
        {"query": "q", "limit": 2**40},
        {"query": "q", "limit": "10"},
        {"query": "q", "limit": False},
        {"query": "q", "similarityThreshold": "high"},
        {"query": "q", "similarityThreshold": True},
        {"query": "q", "providerIdentity": "cohere"},
        {"query": "q", "model": 3},
    ])
    def test_rejects_malformed(self, args):
        """Test that malformed arguments raise ValidationError."""
        with pytest.raises(ValidationError):
            validate_search_memories_args(args)


class TestListMemoriesArgs:
    """Tests for listMemories validation."""

    def test_empty_arguments(self):
        """Test that no filters is valid and leaves limit unset."""
        result = validate_list_memories_args({})

        assert result.limit is None
        assert result.offset is None
        assert result.tags == []

    def test_none_arguments(self):
        """Test that a missing argument object is treated as empty."""
        assert validate_list_memories_args(None).limit is None

    def test_dates_parsed(self):
        """Test ISO dates, with naive values read as UTC."""
        result = validate_list_memories_args({
            "startDate": "2025-01-01",
            "endDate": "2025-01-31T23:59:59Z",
        })

        assert result.start_date == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert result.end_date == datetime(2025, 1, 31, 23, 59, 59, tzinfo=timezone.utc)

    def test_full_arguments(self):
        """Test that every field is converted."""
        result = validate_list_memories_args({
            "limit": 20,
            "offset": 40,
            "tags": ["python"],
            "minImportance": 3,
            "providerIdentity": "ollama",
        })

        assert result.limit == 20
        assert result.offset == 40
        assert result.min_importance == 3
        assert result.provider is EmbeddingProviderType.OLLAMA

    @pytest.mark.parametrize("args", [
        {"limit": -1},
        {"offset": -5},
        {"limit": 2**64},
        {"offset": 2**31},
        {"minImportance": 7},
        {"startDate": "yesterday"},
        {"endDate": 20250101},
        {"startDate": "2025-02-01", "endDate": "2025-01-01"},
        {"providerIdentity": "OPENAI-v2"},
    ])
    def test_rejects_malformed(self, args):
        """Test that malformed arguments raise ValidationError."""
        with pytest.raises(ValidationError):
            validate_list_memories_args(args)


class TestDeleteMemoryArgs:
    """Tests for deleteMemory validation."""

    def test_id(self):
        """Test the id argument."""
        assert validate_delete_memory_args({"id": 12}) == 12

    def test_memory_id_alias(self):
        """Test the older memoryId name."""
        assert validate_delete_memory_args({"memoryId": 7}) == 7

    @pytest.mark.parametrize("args", [{}, {"id": "12"}, {"id": True}, {"id": 1.5}, {"id": 2**70}])
    def test_rejects_malformed(self, args):
        """Test that malformed ids raise ValidationError."""
        with pytest.raises(ValidationError):
            validate_delete_memory_args(args)

    def test_largest_id_accepted(self):
        """Test that the largest 32-bit id is still valid."""
        assert validate_delete_memory_args({"id": MAX_INTEGER}) == MAX_INTEGER
