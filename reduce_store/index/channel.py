"""Queued index updates and the single consumer that applies them."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import queue
import threading
import uuid

from reduce_store.index.base import ReductionRepository


logger = logging.getLogger(__name__)


ADD = "add"
REMOVE = "remove"


@dataclass(frozen=True)
class IndexUpdate:
    action: str
    key: uuid.UUID
    url: str | None = None

    @classmethod
    def add(cls, key: uuid.UUID, url: str) -> "IndexUpdate":
        return cls(action=ADD, key=key, url=url)

    @classmethod
    def remove(cls, key: uuid.UUID) -> "IndexUpdate":
        return cls(action=REMOVE, key=key)


def apply_update(repository: ReductionRepository, update: IndexUpdate) -> None:
    if update.action == ADD:
        repository.add(update.key, update.url or "")
    elif update.action == REMOVE:
        repository.remove(update.key)
    else:
        raise ValueError(f"Unknown index update action: {update.action}")


class IndexPump:
    """Drains ``updates`` into the repository from a single thread."""

    def __init__(
        self,
        repository: ReductionRepository,
        updates: "queue.Queue[IndexUpdate]",
        timeout: float = 0.5,
    ) -> None:
        self.repository = repository
        self.updates = updates
        self.timeout = timeout
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def drain(self) -> int:
        applied = 0
        while True:
            try:
                update = self.updates.get_nowait()
            except queue.Empty:
                return applied
            self._apply(update)
            applied += 1

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="reduce-store-index", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self.drain()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                update = self.updates.get(timeout=self.timeout)
            except queue.Empty:
                continue
            self._apply(update)

    def _apply(self, update: IndexUpdate) -> None:
        try:
            apply_update(self.repository, update)
            logger.debug("Index %s applied for %s", update.action, update.key)
        except Exception:
            logger.exception("Failed to apply index update for %s", update.key)
        finally:
            self.updates.task_done()
