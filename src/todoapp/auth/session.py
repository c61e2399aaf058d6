# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadData, URLSafeTimedSerializer

from todoapp.auth.users import authenticate
from todoapp.config import Settings
from todoapp.errors import InvalidCredentials
from todoapp.infra.document_store import DocumentStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."


def _serializer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key=settings.secret_key, salt=settings.session_salt)


@dataclass(frozen=True)
class SessionData:
    user_id: str


@dataclass(frozen=True)
class LoginResult:
    token: str
    user_id: str
    username: str


def sign_session(settings: Settings, user_id: str) -> str:
    # The user id is the only claim; the issue time is part of the signature.
    return _serializer(settings).dumps({"userId": user_id})


def verify_session(settings: Settings, token: str, *, max_age: Optional[int] = None) -> Optional[SessionData]:
    if not token:
        return None
    if max_age is None:
        max_age = settings.session_max_age
    try:
        data = _serializer(settings).loads(token, max_age=max_age)
    except BadData:
        return None
    if not isinstance(data, dict):
        return None
    uid = str(data.get("userId") or "").strip()
    if not uid:
        return None
    return SessionData(user_id=uid)


def login(store: DocumentStore, settings: Settings, email: str, password: str) -> LoginResult:
    """Check credentials and issue a session token.

    Unknown email and wrong password fail the same way, so callers can't tell
    which one was wrong.
    """
    u = authenticate(store, email, password)
    if not u:
        logger.info("Rejected login attempt")
        raise InvalidCredentials(INVALID_CREDENTIALS)
    return LoginResult(token=sign_session(settings, u.id), user_id=u.id, username=u.username)
