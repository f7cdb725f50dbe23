"""
JSON-file backed record collections.

A Repository keeps one homogeneous collection of records (dicts with an
integer ``Id``) in memory and writes it through to a single JSON document on
every mutation.
"""

from recordstore.domain.models import Model, UpdateResult
from recordstore.repositories.repository import Repository

__all__ = ["Model", "Repository", "UpdateResult"]
