"""Logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path


def configure_logging(level: str, log_file: str | None = None) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(threadName)s %(message)s")
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.WARNING if log_file else _level(level))
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(_level(level))
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # The watch polls every interval; per-query engine logs only at DEBUG.
    engine_level = logging.INFO if _level(level) <= logging.DEBUG else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(engine_level)


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)
