# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by the stores, the auth helpers and the HTTP layer.

Every error carries the HTTP status it maps to, so routes never decide
status codes on their own.
"""

from __future__ import annotations


class TodoError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Conflict(TodoError):
    """Duplicate email or username at registration."""

    status_code = 409


class InvalidCredentials(TodoError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    status_code = 400


class Unauthenticated(TodoError):
    """Missing, invalid or expired token, or a token for a user that no longer exists."""

    status_code = 401


class NotFound(TodoError):
    """Task absent or owned by someone else (deliberately indistinguishable)."""

    status_code = 404


class ValidationError(TodoError):
    status_code = 400


class Internal(TodoError):
    status_code = 500


class DuplicateKeyError(Exception):
    """Raised by the document store when an insert would break a unique field."""

    def __init__(self, collection: str, field: str):
        self.collection = collection
        self.field = field
        super().__init__(f"Duplicate value for '{field}' in '{collection}'")
