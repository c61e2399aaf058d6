# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from todoapp.auth.session import verify_session
from todoapp.auth.users import find_by_id
from todoapp.config import Settings
from todoapp.errors import Unauthenticated
from todoapp.infra.document_store import DocumentStore

logger = logging.getLogger(__name__)

PLEASE_AUTHENTICATE = "Please authenticate."

# auto_error=False: a missing header must answer 401 like any other auth failure.
bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    username: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def load_user_from_token(store: DocumentStore, settings: Settings, token: str) -> Optional[CurrentUser]:
    sess = verify_session(settings, token)
    if not sess:
        return None
    u = find_by_id(store, sess.user_id)
    if not u:
        return None
    return CurrentUser(user_id=u.id, username=u.username)


def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """Resolve the bearer token to an existing user or fail with 401."""
    token = credentials.credentials if credentials else ""
    u = load_user_from_token(store, settings, token) if token else None
    if not u:
        logger.info("Unauthenticated request path=%s", request.url.path)
        raise Unauthenticated(PLEASE_AUTHENTICATE)
    request.state.user = u
    return u
