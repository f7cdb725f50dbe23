"""
Query language for Repository.get_all.

A query is a mapping. The reserved ``sort`` entry holds one directive or a
sequence of directives shaped ``field[,asc|desc]``; every other entry is a
filter ``field -> pattern`` where ``*`` matches any run of characters and the
pattern must cover the whole value. Matching is case-insensitive.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import cmp_to_key
import locale
import unicodedata
from typing import Any, Callable, Iterable, Mapping, Sequence

from .models import Model

SORT_PARAM = "sort"
WILDCARD = "*"


@dataclass(frozen=True)
class SortKey:
    field: str
    ascending: bool = True


@dataclass
class ParsedQuery:
    sort_keys: list[SortKey] = field(default_factory=list)
    filters: list[tuple[str, str]] = field(default_factory=list)
    error: list[dict] | None = None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ----------------------------- filtering -----------------------------
def compile_pattern(pattern: str) -> Callable[[str], bool]:
    """
    Build a matcher for a wildcard pattern.

    The pattern is split on ``*``: the first segment must prefix the value, the
    last must suffix it and the ones in between must appear in order in what
    remains. Both sides are case-folded.
    """
    segments = pattern.casefold().split(WILDCARD)
    if len(segments) == 1:
        literal = segments[0]
        return lambda value: value.casefold() == literal

    head, middle, tail = segments[0], segments[1:-1], segments[-1]

    def matcher(value: str) -> bool:
        text = value.casefold()
        if len(text) < len(head) + len(tail):
            return False
        if not text.startswith(head) or not text.endswith(tail):
            return False
        pos, end = len(head), len(text) - len(tail)
        for segment in middle:
            if not segment:
                continue
            found = text.find(segment, pos, end)
            if found < 0:
                return False
            pos = found + len(segment)
        return True

    return matcher


def value_match(value: Any, pattern: Any) -> bool:
    """True when the stringified value matches the wildcard pattern."""
    text, pattern_text = _text(value), _text(pattern)
    if text is None or pattern_text is None:
        return False
    return compile_pattern(pattern_text)(text)


# ----------------------------- parsing -----------------------------
def _parse_sort_directive(directive: Any) -> SortKey | None:
    parts = str(directive or "").split(",")
    name = parts[0].strip()
    if not name:
        return None
    descending = len(parts) > 1 and parts[1].strip().lower() == "desc"
    return SortKey(name, ascending=not descending)


def parse_query(params: Mapping[str, Any], model: Model) -> ParsedQuery:
    """Split query params into sort keys and filters, validating filter fields against the model."""
    parsed = ParsedQuery()
    for name, value in params.items():
        if name == SORT_PARAM:
            directives: Iterable[Any]
            if isinstance(value, (list, tuple)):
                directives = value
            else:
                directives = [value]
            for directive in directives:
                key = _parse_sort_directive(directive)
                if key:
                    parsed.sort_keys.append(key)
        elif model.has_field(name):
            parsed.filters.append((name, value))
        else:
            parsed.error = [{"error": f"{name} is not a valid filter"}]
    return parsed


def filter_records(records: Iterable[dict], filters: Sequence[tuple[str, Any]]) -> list[dict]:
    return [
        record
        for record in records
        if all(value_match(record.get(name), pattern) for name, pattern in filters)
    ]


# ----------------------------- sorting -----------------------------
def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _collate(text: str) -> tuple[str, str, str]:
    # accents and case only break ties
    return _fold(text), locale.strxfrm(text.casefold()), locale.strxfrm(text)


def _cmp(x: Any, y: Any) -> int:
    if x == y:
        return 0
    return -1 if x < y else 1


def compare_values(x: Any, y: Any) -> int:
    """Three-way comparison: text is collated, everything else compared numerically."""
    if x is None or y is None:
        if x is None and y is None:
            return 0
        return -1 if x is None else 1
    if isinstance(x, str) or isinstance(y, str):
        return _cmp(_collate(_text(x)), _collate(_text(y)))
    try:
        return _cmp(x, y)
    except TypeError:
        return _cmp(_collate(_text(x)), _collate(_text(y)))


def make_comparator(sort_keys: Sequence[SortKey]) -> Callable[[dict, dict], int]:
    def compare(a: dict, b: dict) -> int:
        for key in sort_keys:
            result = compare_values(a.get(key.field), b.get(key.field))
            if result:
                return result if key.ascending else -result
        return 0

    return compare


def sort_records(records: Iterable[dict], sort_keys: Sequence[SortKey]) -> list[dict]:
    if not sort_keys:
        return list(records)
    return sorted(records, key=cmp_to_key(make_comparator(sort_keys)))


def query_error(params: Mapping[str, Any], model: Model) -> list[dict] | None:
    """Error descriptor for an unknown filter field, or None when the query is usable."""
    return parse_query(params, model).error


def run_query(records: Sequence[dict], params: Mapping[str, Any], model: Model) -> list[dict]:
    """Filter then sort ``records``; returns the error descriptor for an unknown filter field."""
    parsed = parse_query(params, model)
    if parsed.error:
        return parsed.error
    return sort_records(filter_records(records, parsed.filters), parsed.sort_keys)
