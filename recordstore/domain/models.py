"""Record models and mutation outcomes."""
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Sequence

ID_FIELD = "Id"


class UpdateResult(Enum):
    """Outcome of Repository.update."""

    OK = "ok"
    CONFLICT = "conflict"
    NOT_FOUND = "notFound"
    INVALID = "invalid"


class Model:
    """
    Describes one record type.

    ``name`` gives the storage document its name, ``fields`` lists the fields
    that may be used as query filters and ``key`` optionally names a field whose
    values must be unique across the collection. Subclasses override ``valid``
    for stricter checks.
    """

    def __init__(
        self,
        name: str,
        fields: Sequence[str] = (),
        *,
        key: str | None = None,
        required: Sequence[str] | None = None,
    ) -> None:
        self.name = (name or "").strip()
        if not self.name:
            raise ValueError("Model name is required")
        self.fields = tuple(fields)
        self.key = key or None
        if self.key and self.key not in self.fields:
            self.fields += (self.key,)
        self.required = tuple(required if required is not None else ())

    def has_field(self, name: str) -> bool:
        return name == ID_FIELD or name in self.fields

    def valid(self, record: Any) -> bool:
        if not isinstance(record, Mapping):
            return False
        return all(record.get(field) is not None for field in self.required)

    def __repr__(self) -> str:
        return f"Model(name={self.name!r}, key={self.key!r})"
