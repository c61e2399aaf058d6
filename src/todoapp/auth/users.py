# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from todoapp.auth.passwords import hash_password, verify_password
from todoapp.errors import Conflict, DuplicateKeyError
from todoapp.infra.document_store import DocumentStore
from todoapp.schemas import RegisterRequest

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "Email already in use."
USERNAME_TAKEN = "Username already taken."


@dataclass(frozen=True)
class UserRecord:
    id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str
    dob: date
    gender: str
    username: str
    purpose: str

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "UserRecord":
        dob = doc.get("dob")
        return cls(
            id=str(doc["_id"]),
            first_name=str(doc.get("firstName") or ""),
            last_name=str(doc.get("lastName") or ""),
            email=str(doc.get("email") or ""),
            password_hash=str(doc.get("password") or ""),
            dob=dob if isinstance(dob, date) else date.fromisoformat(str(dob)),
            gender=str(doc.get("gender") or ""),
            username=str(doc.get("username") or ""),
            purpose=str(doc.get("purpose") or ""),
        )

    def public(self) -> Dict[str, Any]:
        """Profile without the password hash."""
        return {
            "_id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "dob": self.dob.isoformat(),
            "gender": self.gender,
            "username": self.username,
            "purpose": self.purpose,
        }


def find_by_email(store: DocumentStore, email: str) -> Optional[UserRecord]:
    e = (email or "").strip()
    if not e:
        return None
    doc = store.users.find_one(email=e)
    return UserRecord.from_doc(doc) if doc else None


def find_by_id(store: DocumentStore, user_id: str) -> Optional[UserRecord]:
    uid = (user_id or "").strip()
    if not uid:
        return None
    doc = store.users.find_one(_id=uid)
    return UserRecord.from_doc(doc) if doc else None


def register(store: DocumentStore, cmd: RegisterRequest) -> UserRecord:
    """Create a user. Email is checked before username for the reported conflict."""
    if store.users.find_one(email=cmd.email):
        raise Conflict(EMAIL_IN_USE)
    if store.users.find_one(username=cmd.username):
        raise Conflict(USERNAME_TAKEN)

    doc = {
        "firstName": cmd.first_name,
        "lastName": cmd.last_name,
        "email": cmd.email,
        "password": hash_password(cmd.password),
        "dob": cmd.dob.isoformat(),
        "gender": cmd.gender,
        "username": cmd.username,
        "purpose": cmd.purpose,
    }
    try:
        stored = store.users.insert_one(doc)
    except DuplicateKeyError as e:
        # Lost a race against a concurrent registration.
        raise Conflict(EMAIL_IN_USE if e.field == "email" else USERNAME_TAKEN) from e

    user = UserRecord.from_doc(stored)
    logger.info("Registered user id=%s username=%s", user.id, user.username)
    return user


def authenticate(store: DocumentStore, email: str, password: str) -> Optional[UserRecord]:
    u = find_by_email(store, email)
    if not u:
        return None
    if not verify_password(u.password_hash, password):
        return None
    return u
