"""Shared helpers for Supabase-backed repositories."""

from datetime import datetime
from typing import Any

from postgrest.exceptions import APIError

from attendance_tracker.domain.errors import StorageError

UNIQUE_VIOLATION = "23505"


def execute(query: Any, action: str) -> Any:
    """Run a PostgREST query, reporting failures as StorageError."""
    try:
        return query.execute()
    except APIError as exc:
        raise StorageError(f"Failed to {action}: {exc.message}") from exc


def is_unique_violation(exc: StorageError) -> bool:
    cause = exc.__cause__
    return isinstance(cause, APIError) and cause.code == UNIQUE_VIOLATION


def parse_timestamp(raw: object) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    raise StorageError(f"Unexpected timestamp value: {raw!r}")
