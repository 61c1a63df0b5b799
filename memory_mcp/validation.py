"""
Validation of inbound tool arguments.

Each ``validate_*_args`` function takes the raw argument mapping sent by an
MCP client and returns a typed input, or raises ValidationError naming the
offending argument. Nothing here touches the network or the database.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .exceptions import ValidationError
from .models import (
    EmbeddingProviderType,
    ListMemoriesInput,
    SearchMemoryInput,
    StoreMemoryInput,
)

MIN_IMPORTANCE = 1
MAX_IMPORTANCE = 5
# Ids and paging values are bound as 32-bit SERIAL/INTEGER parameters
MAX_INTEGER = 2**31 - 1

# Earlier clients sent these names; both spellings are accepted
ARGUMENT_ALIASES = {
    "providerIdentity": "embeddingProvider",
    "model": "embeddingModel",
    "id": "memoryId",
}


def _get(args: Mapping[str, Any], name: str) -> Any:
    """Look up an argument by its name or its alias; None counts as absent."""
    value = args.get(name)
    if value is None and name in ARGUMENT_ALIASES:
        value = args.get(ARGUMENT_ALIASES[name])
    return value


def _require_mapping(args: Any) -> Mapping[str, Any]:
    if args is None:
        return {}
    if not isinstance(args, Mapping):
        raise ValidationError("Arguments must be an object")
    return args


def _string(args: Mapping[str, Any], name: str, required: bool = False) -> Optional[str]:
    value = _get(args, name)
    if value is None:
        if required:
            raise ValidationError(f"'{name}' is required")
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{name}' must be a string")
    if required and not value.strip():
        raise ValidationError(f"'{name}' must not be empty")
    return value


def _string_list(args: Mapping[str, Any], name: str) -> list[str]:
    value = _get(args, name)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"'{name}' must be an array of strings")
    return list(value)


def _integer(
    args: Mapping[str, Any],
    name: str,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
    required: bool = False,
) -> Optional[int]:
    value = _get(args, name)
    if value is None:
        if required:
            raise ValidationError(f"'{name}' is required")
        return None

    # bool is a subclass of int, but true/false is never a count or a score
    if isinstance(value, bool):
        raise ValidationError(f"'{name}' must be an integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError(f"'{name}' must be an integer")

    if minimum is not None and value < minimum:
        raise ValidationError(f"'{name}' must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationError(f"'{name}' must be at most {maximum}")
    return value


def _number(args: Mapping[str, Any], name: str) -> Optional[float]:
    value = _get(args, name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"'{name}' must be a number")
    return float(value)


def _provider(args: Mapping[str, Any], name: str) -> Optional[EmbeddingProviderType]:
    value = _get(args, name)
    if value is None:
        return None
    try:
        return EmbeddingProviderType(value)
    except ValueError:
        known = ", ".join(p.value for p in EmbeddingProviderType)
        raise ValidationError(f"'{name}' must be one of: {known}")


def _date(args: Mapping[str, Any], name: str) -> Optional[datetime]:
    value = _string(args, name)
    if value is None:
        return None
    try:
        # fromisoformat only understands a trailing "Z" from Python 3.11 on
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"'{name}' must be an ISO-8601 date or datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_store_memory_args(args: Any) -> StoreMemoryInput:
    """Validate storeMemory arguments."""
    args = _require_mapping(args)
    return StoreMemoryInput(
        content=_string(args, "content", required=True),
        context=_string(args, "context"),
        tags=_string_list(args, "tags"),
        importance_score=_integer(
            args, "importanceScore", minimum=MIN_IMPORTANCE, maximum=MAX_IMPORTANCE
        ),
    )


def validate_search_memories_args(args: Any) -> SearchMemoryInput:
    """
    Validate searchMemories arguments.

    The threshold is not range-checked: values above 1 simply match nothing.
    """
    args = _require_mapping(args)
    return SearchMemoryInput(
        query=_string(args, "query", required=True),
        limit=_integer(args, "limit", minimum=1, maximum=MAX_INTEGER),
        similarity_threshold=_number(args, "similarityThreshold"),
        tags=_string_list(args, "tags"),
        provider=_provider(args, "providerIdentity"),
        model=_string(args, "model"),
    )


def validate_list_memories_args(args: Any) -> ListMemoriesInput:
    """Validate listMemories arguments. Every argument is optional."""
    args = _require_mapping(args)
    start_date = _date(args, "startDate")
    end_date = _date(args, "endDate")
    if start_date and end_date and start_date > end_date:
        raise ValidationError("'startDate' must not be after 'endDate'")

    return ListMemoriesInput(
        limit=_integer(args, "limit", minimum=1, maximum=MAX_INTEGER),
        offset=_integer(args, "offset", minimum=0, maximum=MAX_INTEGER),
        tags=_string_list(args, "tags"),
        min_importance=_integer(
            args, "minImportance", minimum=MIN_IMPORTANCE, maximum=MAX_IMPORTANCE
        ),
        start_date=start_date,
        end_date=end_date,
        provider=_provider(args, "providerIdentity"),
    )


def validate_delete_memory_args(args: Any) -> int:
    """Validate deleteMemory arguments and return the memory id."""
    args = _require_mapping(args)
    return _integer(args, "id", maximum=MAX_INTEGER, required=True)
