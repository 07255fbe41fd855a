"""Shared helpers for repositories built on the backend data client."""
from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from teastore.core.exceptions import BackendException
from teastore.integrations.supabase_data import BackendResult

ModelT = TypeVar("ModelT", bound=BaseModel)


def unwrap(result: BackendResult, table: str, action: str) -> Any:
    """Return ``result.data`` or raise ``BackendException`` for the failed call."""
    if result.error is not None:
        raise BackendException(
            f"Failed to {action} {table}: {result.error.message}",
            table=table,
            code=result.error.code,
        )
    return result.data


def parse_one(model: type[ModelT], row: Any, table: str) -> ModelT:
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        raise BackendException(f"Invalid {table} record: {exc.errors()[0]['msg']}", table=table) from exc


def parse_many(model: type[ModelT], rows: Any, table: str) -> list[ModelT]:
    if not rows:
        return []
    if not isinstance(rows, list):
        rows = [rows]
    return [parse_one(model, row, table) for row in rows]


def first_row(data: Any) -> Any | None:
    if isinstance(data, list):
        return data[0] if data else None
    return data
