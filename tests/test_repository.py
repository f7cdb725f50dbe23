"""
Repository CRUD, identifier and uniqueness rules against a temporary data directory.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Garante que o pacote recordstore seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from recordstore.core import config as core_config  # noqa: E402
from recordstore.domain.models import Model, UpdateResult  # noqa: E402
from recordstore.repositories.repository import Repository  # noqa: E402


class ContactModel(Model):
    def __init__(self) -> None:
        super().__init__("contact", ("Name", "Email", "Phone"), key="Email", required=("Name", "Email"))

    def valid(self, record) -> bool:
        return super().valid(record) and "@" in str(record.get("Email"))


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("RECORDSTORE_DATA_DIR", str(tmp_path))
    core_config.get_settings.cache_clear()
    yield tmp_path
    core_config.get_settings.cache_clear()


@pytest.fixture()
def repo(data_dir):
    return Repository(ContactModel())


def _stored(data_dir: Path) -> list:
    return json.loads((data_dir / "contacts.json").read_text(encoding="utf-8"))


def test_add_assigns_sequential_ids_and_persists(repo, data_dir):
    assert not (data_dir / "contacts.json").exists()
    alice = repo.add({"Name": "Alice", "Email": "alice@example.com"})
    bob = repo.add({"Name": "Bob", "Email": "bob@example.com", "Id": 99})
    assert alice["Id"] == 1
    assert bob["Id"] == 2
    assert [r["Id"] for r in _stored(data_dir)] == [1, 2]
    assert repo.get(2) == {"Name": "Bob", "Email": "bob@example.com", "Id": 2}


def test_ids_are_not_reused_after_remove(repo):
    repo.add({"Name": "Alice", "Email": "alice@example.com"})
    second = repo.add({"Name": "Bob", "Email": "bob@example.com"})
    assert repo.remove(second["Id"]) is True
    third = repo.add({"Name": "Carol", "Email": "carol@example.com"})
    assert third["Id"] == 2
    assert repo.remove(1) is True
    fourth = repo.add({"Name": "Dan", "Email": "dan@example.com"})
    assert fourth["Id"] == 3


def test_add_invalid_record_returns_none(repo, data_dir):
    assert repo.add({"Name": "Nobody"}) is None
    assert repo.add({"Name": "Nobody", "Email": "no-at-sign"}) is None
    assert repo.get_all() == []
    assert not (data_dir / "contacts.json").exists()


def test_add_conflict_is_flagged_and_not_persisted(repo, data_dir):
    repo.add({"Name": "Alice", "Email": "alice@example.com"})
    result = repo.add({"Name": "Other Alice", "Email": "alice@example.com"})
    assert result["conflict"] is True
    assert "Id" not in result
    assert len(repo.get_all()) == 1
    assert len(_stored(data_dir)) == 1


def test_add_does_not_alias_caller_dict(repo):
    payload = {"Name": "Alice", "Email": "alice@example.com"}
    stored = repo.add(payload)
    assert "Id" not in payload
    payload["Name"] = "Changed"
    assert repo.get(stored["Id"])["Name"] == "Alice"


def test_add_unexpected_failure_returns_none(repo, monkeypatch):
    def boom() -> None:
        raise OSError("disk full")

    monkeypatch.setattr(repo.storage, "write", boom)
    assert repo.add({"Name": "Alice", "Email": "alice@example.com"}) is None
    assert repo.get_all() == []


def test_update_outcomes(repo, data_dir):
    alice = repo.add({"Name": "Alice", "Email": "alice@example.com"})
    repo.add({"Name": "Bob", "Email": "bob@example.com"})

    assert repo.update({"Id": alice["Id"], "Name": "Alice B", "Email": "alice@example.com"}) is UpdateResult.OK
    assert repo.get(alice["Id"]) == {"Id": 1, "Name": "Alice B", "Email": "alice@example.com"}
    assert _stored(data_dir)[0]["Name"] == "Alice B"

    assert repo.update({"Id": 1, "Name": "Alice", "Email": "bob@example.com"}) is UpdateResult.CONFLICT
    assert repo.update({"Id": 1, "Name": "Alice"}) is UpdateResult.INVALID
    assert repo.update({"Id": 42, "Name": "Ghost", "Email": "ghost@example.com"}) is UpdateResult.NOT_FOUND
    assert repo.get(1)["Name"] == "Alice B"


def test_update_replaces_whole_record(repo):
    repo.add({"Name": "Alice", "Email": "alice@example.com", "Phone": "555"})
    assert repo.update({"Id": 1, "Name": "Alice", "Email": "alice@example.com"}) is UpdateResult.OK
    assert "Phone" not in repo.get(1)


def test_update_with_identical_fields_is_a_noop(repo, data_dir):
    repo.add({"Name": "Alice", "Email": "alice@example.com"})
    before = _stored(data_dir)
    assert repo.update(dict(before[0])) is UpdateResult.OK
    assert _stored(data_dir) == before
    assert repo.get_all() == before


def test_remove_missing_id(repo):
    repo.add({"Name": "Alice", "Email": "alice@example.com"})
    assert repo.remove(7) is False
    assert len(repo.get_all()) == 1
    assert repo.get(7) is None


def test_remove_decreases_size_by_one(repo):
    for name in ("a", "b", "c"):
        repo.add({"Name": name, "Email": f"{name}@example.com"})
    assert repo.remove(2) is True
    assert repo.get(2) is None
    assert [r["Id"] for r in repo.get_all()] == [1, 3]


def test_remove_by_index(repo, data_dir):
    for name in ("a", "b", "c", "d"):
        repo.add({"Name": name, "Email": f"{name}@example.com"})
    repo.remove_by_index([3, 0, 3])
    assert [r["Name"] for r in repo.get_all()] == ["b", "c"]
    assert [r["Name"] for r in _stored(data_dir)] == ["b", "c"]


def test_remove_by_index_empty_is_noop(repo, data_dir):
    repo.remove_by_index([])
    assert not (data_dir / "contacts.json").exists()


def test_remove_by_index_out_of_range(repo):
    repo.add({"Name": "a", "Email": "a@example.com"})
    with pytest.raises(IndexError):
        repo.remove_by_index([0, 5])
    assert len(repo.get_all()) == 1


def test_get_all_filter_and_sort(repo):
    for name in ("Alice", "Bob", "Alina"):
        repo.add({"Name": name, "Email": f"{name.lower()}@example.com"})
    assert [r["Id"] for r in repo.get_all({"Name": "Al*"})] == [1, 3]
    assert [r["Name"] for r in repo.get_all({"sort": "Name,desc"})] == ["Bob", "Alina", "Alice"]
    assert [r["Name"] for r in repo.get_all({"Name": "al*", "sort": ["Name"]})] == ["Alice", "Alina"]
    assert repo.get_all({"Nickname": "x"}) == [{"error": "Nickname is not a valid filter"}]
    # storage order untouched
    assert [r["Name"] for r in repo.get_all()] == ["Alice", "Bob", "Alina"]


def test_bind_extra_data_never_mutates_storage(data_dir):
    def with_initials(record: dict) -> dict:
        record["Initials"] = record["Name"][0]
        record["Name"] = record["Name"].upper()
        return record

    repo = Repository(ContactModel(), bind_extra_data=with_initials)
    repo.add({"Name": "Alice", "Email": "alice@example.com"})
    assert repo.get(1) == {"Id": 1, "Name": "ALICE", "Email": "alice@example.com", "Initials": "A"}
    assert repo.get_all() == [{"Id": 1, "Name": "ALICE", "Email": "alice@example.com", "Initials": "A"}]
    assert repo.objects() == [{"Name": "Alice", "Email": "alice@example.com", "Id": 1}]
    assert _stored(data_dir) == [{"Name": "Alice", "Email": "alice@example.com", "Id": 1}]

    repo.set_bind_extra_data(None)
    assert repo.get(1)["Name"] == "Alice"


def test_repository_reloads_persisted_collection(repo, data_dir):
    repo.add({"Name": "Alice", "Email": "alice@example.com"})
    repo.add({"Name": "Bob", "Email": "bob@example.com"})
    fresh = Repository(ContactModel())
    assert fresh.get_all() == repo.get_all()
    assert fresh.next_id() == 3


def test_model_without_key_allows_duplicates(data_dir):
    repo = Repository(Model("note", ("Text",)))
    assert repo.add({"Text": "same"})["Id"] == 1
    assert repo.add({"Text": "same"})["Id"] == 2
    assert (data_dir / "notes.json").exists()


def test_corrupt_document_fails_loudly(data_dir):
    from recordstore.repositories.json_storage import CorruptStorageError

    (data_dir / "contacts.json").write_text("[{broken", encoding="utf-8")
    repo = Repository(ContactModel())
    assert repo.add({"Name": "Alice", "Email": "alice@example.com"}) is None
    with pytest.raises(CorruptStorageError):
        repo.get_all()
    assert (data_dir / "contacts.json").read_text(encoding="utf-8") == "[{broken"


def test_returned_records_are_copies(repo, data_dir):
    added = repo.add({"Name": "Alice", "Email": "alice@example.com"})
    added["Name"] = "from add"
    repo.get_all()[0]["Name"] = "from get_all"
    repo.get(1)["Name"] = "from get"
    assert repo.objects()[0]["Name"] == "Alice"
    assert _stored(data_dir)[0]["Name"] == "Alice"


def test_query_error(repo):
    assert repo.query_error(None) is None
    assert repo.query_error({"Name": "A*", "sort": "Email"}) is None
    assert repo.query_error({"Nickname": "x"}) == [{"error": "Nickname is not a valid filter"}]
