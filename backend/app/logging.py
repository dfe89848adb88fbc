"""structlog setup for the API process.

Development gets the coloured console renderer; any other environment emits
one JSON object per line. Setting LOG_FILE mirrors output into that file.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

from app.config import settings


class _TeeWriter:
    """File-like sink that writes to stdout and appends to ``file_path``.

    A file that cannot be opened or written is dropped and stdout carries on.
    """

    def __init__(self, file_path: str) -> None:
        self._file: IO[str] | None = None
        try:
            self._file = open(file_path, "a")  # noqa: SIM115
        except OSError as exc:
            # structlog is not configured yet
            print(
                f"WARNING: cannot open log file {file_path!r} ({exc}); stdout only.",
                file=sys.stderr,
            )

    @property
    def file_enabled(self) -> bool:
        return self._file is not None

    def _file_op(self, action: str, *args: str) -> None:
        if self._file is None:
            return
        try:
            if action == "write":
                self._file.write(*args)
            self._file.flush()
        except (OSError, ValueError):
            self._file = None
            print(f"WARNING: log file {action} failed; file logging disabled.", file=sys.stderr)

    def write(self, data: str) -> None:
        sys.stdout.write(data)
        self._file_op("write", data)

    def flush(self) -> None:
        sys.stdout.flush()
        self._file_op("flush")


def _level() -> int:
    return logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)


def configure_logging() -> None:
    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.environment == "development"
        else structlog.processors.JSONRenderer()
    )
    # PrintLoggerFactory only needs write() and flush()
    sink = _TeeWriter(settings.log_file) if settings.log_file else None

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sink),  # type: ignore[arg-type]
        cache_logger_on_first_use=True,
    )
