# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from todoapp.auth.session import login
from todoapp.auth.users import register
from todoapp.config import Settings
from todoapp.errors import Internal, TodoError
from todoapp.infra.document_store import DocumentStore
from todoapp.permissions import CurrentUser, get_settings, get_store, require_user
from todoapp.schemas import LoginRequest, RegisterRequest, TaskCreate, TaskUpdate
from todoapp.services.task_service import create_task, delete_task, list_tasks, update_task

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error."

router = APIRouter()


def _body_key(path: str) -> str:
    """Task endpoints answer {"error": ...}; auth endpoints answer {"message": ...}."""
    return "error" if path.startswith("/api/tasks") else "message"


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        msg = str(err.get("msg", "invalid value"))
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "Invalid request: " + ("; ".join(parts) or "malformed body")


async def _todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={_body_key(request.url.path): exc.message})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={_body_key(request.url.path): _describe_validation(exc)})


# ------------------ Routes ------------------


@router.get("/", response_class=PlainTextResponse)
def home():
    return "Your backend server is running and ready!"


@router.post("/api/register", status_code=201)
def register_post(payload: RegisterRequest, store: DocumentStore = Depends(get_store)):
    try:
        register(store, payload)
    except TodoError:
        raise
    except Exception as e:
        logger.exception("Registration error")
        raise Internal(INTERNAL_ERROR) from e
    return {"message": "User registered successfully!"}


@router.post("/api/login")
def login_post(
    payload: LoginRequest,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    try:
        result = login(store, settings, payload.email, payload.password)
    except TodoError:
        raise
    except Exception as e:
        logger.exception("Login error")
        raise Internal(INTERNAL_ERROR) from e
    return {
        "token": result.token,
        "userId": result.user_id,
        "username": result.username,
        "message": "Login successful.",
    }


@router.get("/api/tasks")
def tasks_list(user: CurrentUser = Depends(require_user), store: DocumentStore = Depends(get_store)):
    try:
        return list_tasks(store, user.user_id)
    except Exception as e:
        logger.exception("Failed to fetch tasks user=%s", user.user_id)
        raise Internal("Failed to fetch tasks.") from e


@router.post("/api/tasks", status_code=201)
def tasks_create(
    payload: TaskCreate,
    user: CurrentUser = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        return create_task(store, user.user_id, payload.text)
    except TodoError:
        raise
    except Exception as e:
        logger.exception("Failed to create task user=%s", user.user_id)
        raise Internal("Failed to create task.") from e


@router.put("/api/tasks/{task_id}")
def tasks_update(
    task_id: str,
    payload: TaskUpdate,
    user: CurrentUser = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        return update_task(store, user.user_id, task_id, payload.changes())
    except TodoError:
        raise
    except Exception as e:
        logger.exception("Failed to update task id=%s user=%s", task_id, user.user_id)
        raise Internal("Failed to update task.") from e


@router.delete("/api/tasks/{task_id}")
def tasks_delete(
    task_id: str,
    user: CurrentUser = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        return delete_task(store, user.user_id, task_id)
    except TodoError:
        raise
    except Exception as e:
        logger.exception("Failed to delete task id=%s user=%s", task_id, user.user_id)
        raise Internal("Failed to delete task.") from e


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    """Build the application. Settings are read once here and shared via app.state."""
    settings = settings or Settings.from_env()
    store = store or DocumentStore(settings.data_dir)

    app = FastAPI(title="todoapp")
    app.state.settings = settings
    app.state.store = store

    if settings.allowed_origin:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.allowed_origin],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(TodoError, _todo_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)
    return app
