# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Task CRUD scoped to the caller.

Every lookup filters on both the task id and the owner id. A task that exists
but belongs to someone else is reported exactly like a missing one.
"""

from __future__ import annotations

from typing import Any, Dict, List

from todoapp.errors import NotFound, ValidationError
from todoapp.infra.document_store import DocumentStore

TASK_NOT_FOUND = "Task not found."
EMPTY_TEXT = "Task text must not be empty."


def _task_json(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "_id": doc["_id"],
        "text": doc.get("text", ""),
        "completed": bool(doc.get("completed", False)),
        "owner": doc.get("owner", ""),
    }


def _clean_text(value: Any) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(EMPTY_TEXT)
    return text


def list_tasks(store: DocumentStore, owner_id: str) -> List[Dict[str, Any]]:
    return [_task_json(d) for d in store.tasks.find(owner=owner_id)]


def create_task(store: DocumentStore, owner_id: str, text: str) -> Dict[str, Any]:
    doc = store.tasks.insert_one({"text": _clean_text(text), "completed": False, "owner": owner_id})
    return _task_json(doc)


def update_task(store: DocumentStore, owner_id: str, task_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``text`` and/or ``completed`` into the caller's task.

    Other keys in ``patch`` are ignored; in particular the owner never changes.
    """
    changes: Dict[str, Any] = {}
    if patch.get("text") is not None:
        changes["text"] = _clean_text(patch["text"])
    if patch.get("completed") is not None:
        changes["completed"] = bool(patch["completed"])

    # Ownership check and write happen under the same store lock.
    doc = store.tasks.update_one({"_id": task_id, "owner": owner_id}, changes)
    if doc is None:
        raise NotFound(TASK_NOT_FOUND)
    return _task_json(doc)


def delete_task(store: DocumentStore, owner_id: str, task_id: str) -> Dict[str, Any]:
    doc = store.tasks.find_one_and_delete(_id=task_id, owner=owner_id)
    if doc is None:
        raise NotFound(TASK_NOT_FOUND)
    return _task_json(doc)
