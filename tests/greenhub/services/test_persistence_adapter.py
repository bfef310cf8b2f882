from __future__ import annotations

import json

import pytest

from greenhub.core.exceptions import CorruptPayloadError
from greenhub.services.storage import InMemoryStorage, LocalFileSystemStorage, PersistenceAdapter


def _reject_non_lists(value):
    if not isinstance(value, list):
        raise CorruptPayloadError("expected a list")


def test_set_get_roundtrip_in_memory():
    adapter = PersistenceAdapter(InMemoryStorage())
    adapter.set("favorites", ["R1", "R2"])

    assert adapter.get("favorites") == ["R1", "R2"]


def test_keys_are_namespaced():
    storage = InMemoryStorage()
    PersistenceAdapter(storage).set("session", {"id": "x"})

    assert storage.exists("greenhub:session")
    assert json.loads(storage.snapshot()["greenhub:session"]) == {"id": "x"}


def test_missing_key_is_none():
    assert PersistenceAdapter(InMemoryStorage()).get("nothing") is None


@pytest.mark.parametrize("raw", ["{not json", "", b"\xff\xfe"])
def test_undecodable_payload_is_removed_and_reported_absent(raw):
    storage = InMemoryStorage({"greenhub:session": raw})
    adapter = PersistenceAdapter(storage)

    assert adapter.get("session") is None
    assert not storage.exists("greenhub:session")


def test_validator_rejection_removes_payload():
    storage = InMemoryStorage({"greenhub:favorites": '{"a": 1}'})
    adapter = PersistenceAdapter(storage)

    assert adapter.get("favorites", validate=_reject_non_lists) is None
    assert not storage.exists("greenhub:favorites")


def test_remove_is_idempotent():
    adapter = PersistenceAdapter(InMemoryStorage())
    adapter.set("session", {"id": "x"})
    adapter.remove("session")
    adapter.remove("session")

    assert adapter.get("session") is None


def test_filesystem_backend_roundtrip(tmp_path):
    adapter = PersistenceAdapter(LocalFileSystemStorage(tmp_path))
    adapter.set("favorites", ["R1"])

    assert adapter.get("favorites") == ["R1"]
    assert (tmp_path / "greenhub__favorites.json").is_file()
    # no temp files left behind
    assert [p.name for p in tmp_path.iterdir()] == ["greenhub__favorites.json"]


def test_filesystem_backend_recovers_from_corrupt_file(tmp_path):
    (tmp_path / "greenhub__session.json").write_text("{{{", encoding="utf-8")
    storage = LocalFileSystemStorage(tmp_path)
    adapter = PersistenceAdapter(storage)

    assert adapter.get("session") is None
    assert not (tmp_path / "greenhub__session.json").exists()


def test_filesystem_backend_rejects_path_traversal(tmp_path):
    storage = LocalFileSystemStorage(tmp_path / "state")

    with pytest.raises(ValueError):
        storage.write_bytes("../escape", b"{}")
    with pytest.raises(ValueError):
        storage.read_bytes("nested/key")
