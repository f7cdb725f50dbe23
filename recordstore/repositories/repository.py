"""CRUD and query operations on a JSON-backed record collection."""
from __future__ import annotations

import copy
import logging
import os
from typing import Any, Callable, Iterable, Mapping, Optional

from recordstore.core.utils import collection_name, delete_by_index
from recordstore.domain.models import ID_FIELD, Model, UpdateResult
from recordstore.domain.query import query_error, run_query
from recordstore.domain.records import NO_EXCLUSION, find_by_field, find_index, next_id
from recordstore.repositories.json_storage import JsonStorage

logger = logging.getLogger(__name__)

BindExtraData = Callable[[dict], dict]


class Repository:
    """
    One record collection backed by ``<data_dir>/<model.name>s.json``.

    Records get their ``Id`` here, never from the caller. Mutations are
    reported as values (``None``, a conflict-flagged record, ``UpdateResult``,
    ``bool``) rather than exceptions.
    """

    def __init__(
        self,
        model: Model,
        *,
        data_dir: str | os.PathLike | None = None,
        bind_extra_data: BindExtraData | None = None,
    ) -> None:
        self.model = model
        self.objects_name = collection_name(model.name)
        self.storage = JsonStorage(self.objects_name, data_dir)
        self.bind_extra_data_method = bind_extra_data

    def set_bind_extra_data(self, method: BindExtraData | None) -> None:
        self.bind_extra_data_method = method

    def objects(self) -> list[dict]:
        return self.storage.objects()

    def next_id(self) -> int:
        return next_id(self.objects())

    def find_by_field(self, field: str | None, value: Any, excluded_id: int = NO_EXCLUSION) -> Optional[dict]:
        return find_by_field(self.objects(), field, value, excluded_id)

    def _bind_extra_data(self, record: dict) -> dict:
        if self.bind_extra_data_method is None:
            return dict(record)
        return self.bind_extra_data_method(copy.deepcopy(record))

    # -------------------------- mutations --------------------------
    def add(self, record: Mapping[str, Any]) -> Optional[dict]:
        """Store a new record; returns it with its Id, a conflict-flagged copy, or None."""
        try:
            if not self.model.valid(record):
                logger.debug("Rejected invalid %s record", self.model.name)
                return None
            entity = dict(record)
            entity.pop(ID_FIELD, None)
            key = self.model.key
            if key and self.find_by_field(key, entity.get(key)) is not None:
                entity["conflict"] = True
                return entity
            entity[ID_FIELD] = self.next_id()
            objects = self.objects()
            objects.append(entity)
            try:
                self.storage.write()
            except Exception:
                objects.pop()
                raise
            return dict(entity)
        except Exception:
            logger.exception("Error adding new item in %s repository", self.objects_name)
            return None

    def update(self, record: Mapping[str, Any]) -> UpdateResult:
        """Replace the stored record carrying the same Id."""
        if not self.model.valid(record):
            return UpdateResult.INVALID
        record_id = record.get(ID_FIELD)
        key = self.model.key
        if key and self.find_by_field(key, record.get(key), record_id) is not None:
            return UpdateResult.CONFLICT
        objects = self.objects()
        index = find_index(objects, record_id)
        if index < 0:
            return UpdateResult.NOT_FOUND
        objects[index] = dict(record)
        self.storage.write()
        return UpdateResult.OK

    def remove(self, record_id: int) -> bool:
        objects = self.objects()
        index = find_index(objects, record_id)
        if index < 0:
            return False
        del objects[index]
        self.storage.write()
        return True

    def remove_by_index(self, positions: Iterable[int]) -> None:
        """Delete the records at the given collection positions with a single write."""
        positions = list(positions)
        if not positions:
            return
        delete_by_index(self.objects(), positions)
        self.storage.write()

    # -------------------------- reads --------------------------
    def get(self, record_id: int) -> Optional[dict]:
        objects = self.objects()
        index = find_index(objects, record_id)
        if index < 0:
            return None
        return self._bind_extra_data(objects[index])

    def query_error(self, params: Mapping[str, Any] | None) -> list[dict] | None:
        """Descriptor returned by get_all for an unusable query, None otherwise."""
        if not params:
            return None
        return query_error(params, self.model)

    def get_all(self, params: Mapping[str, Any] | None = None) -> list[dict]:
        """
        Return the collection, optionally filtered and sorted.

        Without params the records come back in storage order. With params,
        ``sort`` holds ``field[,desc]`` directives and every other key filters
        on a wildcard pattern; an unknown filter field returns
        ``[{"error": "<field> is not a valid filter"}]`` instead of records.
        """
        records = [self._bind_extra_data(record) for record in self.objects()]
        if not params:
            return records
        return run_query(records, params, self.model)
