"""
JSON document persistence for one record collection.

The whole collection is read once, kept in memory and rewritten in full after
every mutation. There is no locking: two processes writing the same document
will overwrite each other's changes, so a document must only be owned by one
process (and one JsonStorage instance) at a time.
"""

from __future__ import annotations

from pathlib import Path
import json
import logging
import os

from recordstore.core.config import get_settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base exception for document persistence."""


class CorruptStorageError(StorageError):
    """Raised when the backing document exists but cannot be parsed."""


class JsonStorage:
    """Lazy-loaded, write-through cache of a JSON array document."""

    def __init__(self, name: str, data_dir: str | os.PathLike | None = None) -> None:
        self.name = name
        base = Path(data_dir) if data_dir is not None else get_settings().data_dir
        self.path = base / f"{name}.json"
        self._objects: list[dict] | None = None

    @property
    def loaded(self) -> bool:
        return self._objects is not None

    def objects(self) -> list[dict]:
        if self._objects is None:
            self.read()
        return self._objects

    def read(self) -> None:
        """(Re)load the document into memory; a missing document is an empty collection."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("%s repository does not exist. It will be created on demand", self.name)
            self._objects = []
            return
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Error while reading %s repository (%s): %s", self.name, self.path, exc)
            self._objects = None
            raise CorruptStorageError(f"{self.path} is not valid JSON") from exc
        if not isinstance(data, list):
            logger.error("Error while reading %s repository (%s): expected a JSON array", self.name, self.path)
            self._objects = None
            raise CorruptStorageError(f"{self.path} does not contain a JSON array")
        self._objects = data

    def write(self) -> None:
        """Replace the document with the current in-memory collection."""
        objects = self.objects()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(
                json.dumps(objects, ensure_ascii=False, indent=get_settings().json_indent),
                encoding="utf-8",
            )
            tmp.replace(self.path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
