"""Shared reduction index interface and in-memory implementation."""

from __future__ import annotations

import threading
from typing import Protocol
import uuid


class ReductionRepository(Protocol):
    def add(self, key: uuid.UUID, url: str) -> None:
        ...

    def remove(self, key: uuid.UUID) -> None:
        ...


class InMemoryReductionRepository:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._urls: dict[uuid.UUID, str] = {}

    def add(self, key: uuid.UUID, url: str) -> None:
        with self._lock:
            self._urls[key] = url

    def remove(self, key: uuid.UUID) -> None:
        with self._lock:
            self._urls.pop(key, None)

    def get(self, key: uuid.UUID) -> str | None:
        with self._lock:
            return self._urls.get(key)

    def snapshot(self) -> dict[uuid.UUID, str]:
        with self._lock:
            return dict(self._urls)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)
