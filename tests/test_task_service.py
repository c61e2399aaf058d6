import pytest

from todoapp.errors import NotFound, ValidationError
from todoapp.services.task_service import create_task, delete_task, list_tasks, update_task


def test_create_and_list_scoped_to_owner(store):
    create_task(store, "alice", "  buy milk ")
    create_task(store, "bob", "walk dog")

    tasks = list_tasks(store, "alice")
    assert len(tasks) == 1
    assert tasks[0]["text"] == "buy milk"
    assert tasks[0]["completed"] is False
    assert tasks[0]["owner"] == "alice"


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_create_rejects_blank_text(store, text):
    with pytest.raises(ValidationError):
        create_task(store, "alice", text)
    assert list_tasks(store, "alice") == []


def test_update_merges_patch(store):
    t = create_task(store, "alice", "buy milk")
    done = update_task(store, "alice", t["_id"], {"completed": True})
    assert done["completed"] is True
    assert done["text"] == "buy milk"

    renamed = update_task(store, "alice", t["_id"], {"text": " buy oat milk "})
    assert renamed["text"] == "buy oat milk"
    assert renamed["completed"] is True


def test_update_never_reassigns_owner(store):
    t = create_task(store, "alice", "buy milk")
    updated = update_task(store, "alice", t["_id"], {"owner": "bob", "completed": True})
    assert updated["owner"] == "alice"
    assert list_tasks(store, "bob") == []


def test_update_rejects_blank_text(store):
    t = create_task(store, "alice", "buy milk")
    with pytest.raises(ValidationError):
        update_task(store, "alice", t["_id"], {"text": "  "})
    assert list_tasks(store, "alice")[0]["text"] == "buy milk"


def test_other_owner_gets_not_found(store):
    t = create_task(store, "alice", "buy milk")

    with pytest.raises(NotFound) as upd:
        update_task(store, "bob", t["_id"], {"completed": True})
    with pytest.raises(NotFound) as missing:
        update_task(store, "bob", "0" * 24, {"completed": True})
    assert upd.value.message == missing.value.message

    with pytest.raises(NotFound):
        delete_task(store, "bob", t["_id"])

    assert list_tasks(store, "alice")[0]["completed"] is False


def test_delete_is_permanent(store):
    t = create_task(store, "alice", "buy milk")
    deleted = delete_task(store, "alice", t["_id"])
    assert deleted["_id"] == t["_id"]
    assert list_tasks(store, "alice") == []
    with pytest.raises(NotFound):
        delete_task(store, "alice", t["_id"])
