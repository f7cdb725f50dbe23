"""Identifier assignment and key-field lookups over a collection."""
from __future__ import annotations

from typing import Any, Iterable, Optional

from .models import ID_FIELD

# Real records start at 1, so 0 never excludes anything.
NO_EXCLUSION = 0


def next_id(records: Iterable[dict]) -> int:
    """Return 1 + the highest Id present (1 for an empty collection)."""
    max_id = 0
    for record in records:
        current = record.get(ID_FIELD)
        if isinstance(current, int) and current > max_id:
            max_id = current
    return max_id + 1


def find_by_field(
    records: Iterable[dict],
    field: str | None,
    value: Any,
    excluded_id: int = NO_EXCLUSION,
) -> Optional[dict]:
    """First record whose ``field`` equals ``value``, skipping the record with ``excluded_id``."""
    if not field:
        return None
    for record in records:
        if field in record and record[field] == value:
            if record.get(ID_FIELD) != excluded_id:
                return record
    return None


def find_index(records: Iterable[dict], record_id: Any) -> int:
    """Position of the record with the given Id, or -1."""
    for index, record in enumerate(records):
        if record.get(ID_FIELD) == record_id:
            return index
    return -1
