"""Configuration loading for the artifact store."""

from __future__ import annotations

from dataclasses import dataclass, replace
import os


DEFAULT_VIRTUAL_PATH = "/RequestReduceContent"


@dataclass(frozen=True)
class StoreConfig:
    storage_root: str = ""
    db_url: str = "sqlite:///reduce_store.db"
    content_host: str = ""
    virtual_path: str = DEFAULT_VIRTUAL_PATH
    watch_enabled: bool = False
    poll_seconds: float = 1.0
    log_level: str = "INFO"
    log_file: str | None = None

    def with_storage_root(self, storage_root: str) -> "StoreConfig":
        return replace(self, storage_root=storage_root)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> StoreConfig:
    storage_root = os.getenv("REDUCE_STORE_ROOT", "")
    db_url = os.getenv("REDUCE_STORE_DB_URL", "sqlite:///reduce_store.db")
    content_host = os.getenv("REDUCE_STORE_CONTENT_HOST", "")
    virtual_path = os.getenv("REDUCE_STORE_VIRTUAL_PATH", DEFAULT_VIRTUAL_PATH)
    watch_enabled = _env_flag("REDUCE_STORE_WATCH")
    poll_seconds = float(os.getenv("REDUCE_STORE_POLL_SECONDS", "1.0"))
    log_level = os.getenv("REDUCE_STORE_LOG_LEVEL", "INFO")
    log_file = os.getenv("REDUCE_STORE_LOG_FILE") or None
    return StoreConfig(
        storage_root=storage_root,
        db_url=db_url,
        content_host=content_host,
        virtual_path=virtual_path.rstrip("/"),
        watch_enabled=watch_enabled,
        poll_seconds=poll_seconds,
        log_level=log_level,
        log_file=log_file,
    )
