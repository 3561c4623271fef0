"""Logging configuration.

Log records go to stderr so rendered output on stdout stays clean.
"""
from __future__ import annotations

import logging.config
from typing import Any


def logging_config(level: str = "WARNING") -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"}
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stderr",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(level: str = "WARNING") -> None:
    logging.config.dictConfig(logging_config(level.upper()))
