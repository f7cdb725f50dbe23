"""
Utility helpers shared by repositories and scripts.
"""
from __future__ import annotations

from typing import Any, Iterable, MutableSequence


def collection_name(model_name: str) -> str:
    """Plural name of a record type, used as its document name ("contact" -> "contacts")."""
    return (model_name or "").strip() + "s"


def delete_by_index(items: MutableSequence[Any], positions: Iterable[int]) -> None:
    """
    Remove the entries at the given positions in place.

    Positions refer to the sequence as it was before the call; duplicates are
    ignored. An out-of-range position raises IndexError before anything is
    removed.
    """
    unique = sorted(set(positions), reverse=True)
    size = len(items)
    for pos in unique:
        if pos < 0 or pos >= size:
            raise IndexError(f"position {pos} out of range for {size} items")
    for pos in unique:
        del items[pos]
