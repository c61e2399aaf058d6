# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request bodies, validated into typed commands before any store call."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

# Required text, trimmed before storage.
Trimmed = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# Passwords are never trimmed.
Password = Annotated[str, StringConstraints(min_length=1)]

Gender = Literal["Male", "Female", "Non-binary", "Prefer not to say"]


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: Trimmed = Field(alias="firstName")
    last_name: Trimmed = Field(alias="lastName")
    email: Trimmed
    password: Password
    dob: date
    gender: Gender
    username: Trimmed
    purpose: Trimmed


class LoginRequest(BaseModel):
    email: Annotated[str, StringConstraints(strip_whitespace=True)]
    password: str


class TaskCreate(BaseModel):
    # Emptiness is checked by the task service so it reports a task-specific error.
    text: str


class TaskUpdate(BaseModel):
    # Unknown fields (e.g. "owner") are ignored, so ownership can't be reassigned.
    text: Optional[str] = None
    completed: Optional[bool] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)
