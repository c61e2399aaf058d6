# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""YAML-backed document store.

Each collection lives in its own file under the data directory:

    version: 1
    documents:
      - _id: 65f0c2...
        text: buy milk
        ...

Writes go to a fresh temporary file and replace the collection file in one
step, so a single-document write is never observed half-done. Every
read-modify-write cycle holds a lock file in the data directory, which
serialises writers across threads, store instances and worker processes.
"""

from __future__ import annotations

import contextlib
import logging
import os
import secrets
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import yaml
from filelock import FileLock

from todoapp.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

FILE_VERSION = 1
LOCK_FILENAME = ".store.lock"

Document = Dict[str, Any]
# (st_mtime_ns, st_size, st_ino): every replace gets a new inode.
FileStamp = Tuple[int, int, int]


def new_object_id() -> str:
    """24 hex chars, same shape as a Mongo ObjectId."""
    return secrets.token_hex(12)


def _matches(doc: Document, filters: Dict[str, Any]) -> bool:
    return all(doc.get(k) == v for k, v in filters.items())


class Collection:
    def __init__(
        self,
        name: str,
        path: Path,
        lock: threading.RLock,
        file_lock: FileLock,
        unique: Iterable[str] = (),
    ):
        self.name = name
        self.path = path
        self.unique: Tuple[str, ...] = tuple(unique)
        self._lock = lock
        self._file_lock = file_lock
        self._cache: Tuple[Optional[FileStamp], List[Document]] = (None, [])

    # ---- file helpers ----

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock, self._file_lock:
            yield

    def _stamp(self) -> Optional[FileStamp]:
        try:
            st = self.path.stat()
        except FileNotFoundError:
            return None
        return (st.st_mtime_ns, st.st_size, st.st_ino)

    def _load(self, *, fresh: bool = False) -> List[Document]:
        """Read the collection. Writers pass fresh=True and never trust the cache."""
        stamp = self._stamp()
        cached_stamp, cached_docs = self._cache
        if not fresh and stamp is not None and stamp == cached_stamp:
            return cached_docs

        if stamp is None:
            docs: List[Document] = []
        else:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
            items = (raw.get("documents") or []) if isinstance(raw, dict) else []
            docs = [dict(d) for d in items if isinstance(d, dict) and d.get("_id")]
        self._cache = (stamp, docs)
        return docs

    def _save(self, docs: List[Document]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = yaml.safe_dump({"version": FILE_VERSION, "documents": docs}, sort_keys=False, allow_unicode=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=str(self.path.parent),
            prefix=self.path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as fh:
            fh.write(payload)
            tmp_name = fh.name
        try:
            os.replace(tmp_name, self.path)
        except OSError:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
        self._cache = (self._stamp(), docs)

    # ---- queries ----

    def find(self, **filters: Any) -> List[Document]:
        with self._locked():
            return [dict(d) for d in self._load() if _matches(d, filters)]

    def find_one(self, **filters: Any) -> Optional[Document]:
        with self._locked():
            for d in self._load():
                if _matches(d, filters):
                    return dict(d)
        return None

    def count(self, **filters: Any) -> int:
        with self._locked():
            return sum(1 for d in self._load() if _matches(d, filters))

    # ---- writes ----

    def insert_one(self, doc: Document) -> Document:
        """Insert a copy of ``doc`` with a fresh ``_id`` and return it.

        Raises DuplicateKeyError if a unique field already holds the same value.
        """
        with self._locked():
            docs = self._load(fresh=True)
            for field in self.unique:
                value = doc.get(field)
                if any(d.get(field) == value for d in docs):
                    raise DuplicateKeyError(self.name, field)

            stored = {"_id": new_object_id(), **{k: v for k, v in doc.items() if k != "_id"}}
            self._save(docs + [stored])
            return dict(stored)

    def update_one(self, filters: Dict[str, Any], changes: Dict[str, Any]) -> Optional[Document]:
        """Merge ``changes`` into the first document matching ``filters``.

        Returns the updated document, or None when nothing matched. ``_id`` is
        never changed.
        """
        with self._locked():
            docs = self._load(fresh=True)
            for idx, d in enumerate(docs):
                if _matches(d, filters):
                    updated = {**d, **{k: v for k, v in changes.items() if k != "_id"}}
                    self._save(docs[:idx] + [updated] + docs[idx + 1:])
                    return dict(updated)
        return None

    def find_one_and_delete(self, **filters: Any) -> Optional[Document]:
        with self._locked():
            docs = self._load(fresh=True)
            for idx, d in enumerate(docs):
                if _matches(d, filters):
                    self._save(docs[:idx] + docs[idx + 1:])
                    return dict(d)
        return None


class DocumentStore:
    """The two collections the service persists: users and tasks."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._file_lock = FileLock(str(self.data_dir / LOCK_FILENAME))
        self.users = Collection(
            "users", self.data_dir / "users.yml", self._lock, self._file_lock, unique=("email", "username")
        )
        self.tasks = Collection("tasks", self.data_dir / "tasks.yml", self._lock, self._file_lock)
        logger.info(
            "Document store ready dir=%s users=%s tasks=%s",
            self.data_dir,
            self.users.count(),
            self.tasks.count(),
        )
