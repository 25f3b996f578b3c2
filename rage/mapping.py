"""JSON mapping between response/request bytes and Python objects.

Parsing and rendering go through pydantic TypeAdapter, so targets can be
pydantic models, lists of models, dataclasses, TypedDicts or plain types.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from rage.errors import RageError
from rage.result import Failure, Result, Success

T = TypeVar("T")

JSON_PARSING_ERROR_MESSAGE = "Couldn't parse object from JSON"


@lru_cache(maxsize=128)
def _adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def parse_json(data: bytes | None, target_type: type[T]) -> Result[T]:
    """Parse JSON bytes into target_type. Failures are configuration errors."""
    if not data:
        return Failure(RageError.configuration(JSON_PARSING_ERROR_MESSAGE))
    try:
        return Success(_adapter(target_type).validate_json(data))
    except ValidationError:
        return Failure(RageError.configuration(JSON_PARSING_ERROR_MESSAGE))


def to_json_string(value: Any) -> str:
    """Render a value as a JSON string (models via their own serializer)."""
    return _adapter(type(value)).dump_json(value).decode("utf-8")
