import threading

import pytest
import yaml

from todoapp.errors import DuplicateKeyError
from todoapp.infra.document_store import DocumentStore


def test_insert_assigns_id_and_persists(tmp_path):
    store = DocumentStore(tmp_path)
    doc = store.tasks.insert_one({"text": "buy milk", "completed": False, "owner": "u1"})
    assert len(doc["_id"]) == 24

    raw = yaml.safe_load((tmp_path / "tasks.yml").read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["documents"][0]["text"] == "buy milk"

    # A fresh store over the same directory sees the same data
    again = DocumentStore(tmp_path)
    assert again.tasks.find_one(_id=doc["_id"]) == doc


def test_unique_fields_are_enforced_in_order(tmp_path):
    store = DocumentStore(tmp_path)
    store.users.insert_one({"email": "a@x.io", "username": "a"})

    with pytest.raises(DuplicateKeyError) as exc:
        store.users.insert_one({"email": "a@x.io", "username": "a"})
    assert exc.value.field == "email"

    with pytest.raises(DuplicateKeyError) as exc:
        store.users.insert_one({"email": "b@x.io", "username": "a"})
    assert exc.value.field == "username"
    assert store.users.count() == 1


def test_update_merges_and_keeps_id(tmp_path):
    store = DocumentStore(tmp_path)
    doc = store.tasks.insert_one({"text": "a", "completed": False, "owner": "u1"})

    updated = store.tasks.update_one({"_id": doc["_id"]}, {"completed": True, "_id": "other"})
    assert updated["_id"] == doc["_id"]
    assert updated["completed"] is True
    assert updated["text"] == "a"

    assert store.tasks.update_one({"_id": "missing"}, {"completed": True}) is None


def test_returned_documents_are_copies(tmp_path):
    store = DocumentStore(tmp_path)
    doc = store.tasks.insert_one({"text": "a", "owner": "u1"})
    found = store.tasks.find_one(_id=doc["_id"])
    found["text"] = "mutated"
    assert store.tasks.find_one(_id=doc["_id"])["text"] == "a"


def test_find_filters_and_delete(tmp_path):
    store = DocumentStore(tmp_path)
    a = store.tasks.insert_one({"text": "a", "owner": "u1"})
    store.tasks.insert_one({"text": "b", "owner": "u2"})
    store.tasks.insert_one({"text": "c", "owner": "u1"})

    assert [d["text"] for d in store.tasks.find(owner="u1")] == ["a", "c"]

    assert store.tasks.find_one_and_delete(_id=a["_id"], owner="u2") is None
    deleted = store.tasks.find_one_and_delete(_id=a["_id"], owner="u1")
    assert deleted["text"] == "a"
    assert store.tasks.count() == 2


def test_two_stores_on_one_directory_keep_every_write(tmp_path):
    first = DocumentStore(tmp_path)
    second = DocumentStore(tmp_path)
    errors = []

    def writer(store, owner):
        try:
            for i in range(50):
                store.tasks.insert_one({"text": f"{owner}-{i}", "completed": False, "owner": owner})
        except Exception as e:
            errors.append(e)

    threads = [
        threading.Thread(target=writer, args=(first, "u1")),
        threading.Thread(target=writer, args=(second, "u2")),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert first.tasks.count() == 100
    assert second.tasks.count(owner="u1") == 50
    assert DocumentStore(tmp_path).tasks.count(owner="u2") == 50
    assert not list(tmp_path.glob("*.tmp"))


def test_unique_fields_hold_across_store_instances(tmp_path):
    first = DocumentStore(tmp_path)
    second = DocumentStore(tmp_path)
    first.users.insert_one({"email": "a@x.io", "username": "a"})
    # second may have cached the empty collection before the insert
    with pytest.raises(DuplicateKeyError):
        second.users.insert_one({"email": "a@x.io", "username": "b"})
