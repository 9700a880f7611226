"""Structured run logger passed into the generator.

Messages go through a stdlib :class:`logging.Logger`; the ``fields`` mapping
is appended as ``key=value`` pairs and attached to the record as
``record.fields`` so handlers can consume it directly.
"""
from __future__ import annotations

import logging
from typing import Any

DEFAULT_LOGGER_NAME = "rc6_constants.generator"


def format_fields(fields: dict[str, Any]) -> str:
    if not fields:
        return ""
    return " " + " ".join(f"{key}={value}" for key, value in fields.items())


class RunLogger:
    """``{level, message, fields}`` logging capability for one run."""

    def __init__(
        self, logger: logging.Logger | None = None, *, detailed: bool = True
    ) -> None:
        self.logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.detailed = detailed
        self.logger.setLevel(logging.DEBUG if detailed else logging.WARNING)

    def log(self, level: int, message: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level, "%s%s", message, format_fields(fields), extra={"fields": fields}
        )

    def debug(self, message: str, **fields: Any) -> None:
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.log(logging.ERROR, message, **fields)


__all__ = ["RunLogger", "format_fields", "DEFAULT_LOGGER_NAME"]
