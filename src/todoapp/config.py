# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process-wide settings, read from the environment once at startup."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

TRUTHY = {"1", "true", "yes", "y"}


def _flag(value: str) -> bool:
    return (value or "").strip().lower() in TRUTHY


@dataclass(frozen=True)
class Settings:
    secret_key: str
    data_dir: Path = Path("data")
    host: str = "0.0.0.0"
    port: int = 5000
    allowed_origin: str = ""
    session_max_age: int = 3600  # 1 hour
    session_salt: str = "todoapp.session.v1"
    log_level: str = "INFO"
    log_format: str = "text"
    reload: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        if environ is None:
            # A .env in the working directory fills in whatever the real environment lacks.
            load_dotenv(find_dotenv(usecwd=True), override=False)
        env = os.environ if environ is None else environ

        secret = env.get("TODO_SECRET_KEY") or env.get("SECRET_KEY")
        if not secret:
            raise RuntimeError("Missing TODO_SECRET_KEY (or SECRET_KEY) in environment")

        log_format = (env.get("TODO_LOG_FORMAT") or "text").strip().lower()
        if log_format not in {"text", "json"}:
            raise RuntimeError(f"Unsupported TODO_LOG_FORMAT '{log_format}' (use text or json)")

        return cls(
            secret_key=secret,
            data_dir=Path(env.get("TODO_DATA_DIR") or "data").resolve(),
            host=env.get("TODO_HOST") or "0.0.0.0",
            port=int(env.get("TODO_PORT") or env.get("PORT") or "5000"),
            allowed_origin=(env.get("TODO_ALLOWED_ORIGIN") or "").strip(),
            session_max_age=int(env.get("TODO_SESSION_MAX_AGE") or "3600"),
            session_salt=env.get("TODO_SESSION_SALT") or "todoapp.session.v1",
            log_level=(env.get("TODO_LOG_LEVEL") or "INFO").strip().upper(),
            log_format=log_format,
            reload=_flag(env.get("TODO_RELOAD", "")),
        )
