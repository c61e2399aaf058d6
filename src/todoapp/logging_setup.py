# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging configuration for the service."""

from __future__ import annotations

import logging.config
from typing import Any, Dict


def build_logging_config(level: str = "INFO", fmt: str = "text") -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "text": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": fmt,
            },
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Call once, before the server starts."""
    logging.config.dictConfig(build_logging_config(level, fmt))
