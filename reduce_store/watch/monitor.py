"""Polling watch over the storage root that keeps the shared index in sync."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
import queue
import threading
from typing import Iterable

from reduce_store.index.channel import IndexUpdate
from reduce_store.naming.uri_builder import NIL_KEY, UriBuilder
from reduce_store.resources.base import ResourceKind, match_kind
from reduce_store.storage.files import matches_pattern
from reduce_store.storage.paths import is_expired


logger = logging.getLogger(__name__)


WATCH_PATTERN = "*RequestReduce*"

CREATED = "created"
CHANGED = "changed"
DELETED = "deleted"


@dataclass(frozen=True)
class FileEvent:
    change_type: str
    path: str


def _raise(error: OSError) -> None:
    raise error


def _scan(root: str, pattern: str) -> dict[str, tuple[int, int]]:
    """Snapshot matching files under ``root``.

    Raises ``OSError`` when any directory cannot be listed; a partial scan
    would read as mass deletion.
    """
    snapshot: dict[str, tuple[int, int]] = {}
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for filename in filenames:
            if not matches_pattern(filename, pattern):
                continue
            path = os.path.join(dirpath, filename)
            try:
                stat = os.stat(path)
            except FileNotFoundError:
                continue
            snapshot[path] = (stat.st_mtime_ns, stat.st_size)
    return snapshot


def diff_snapshots(
    before: dict[str, tuple[int, int]],
    after: dict[str, tuple[int, int]],
) -> list[FileEvent]:
    events = [FileEvent(DELETED, path) for path in sorted(before.keys() - after.keys())]
    for path in sorted(after):
        if path not in before:
            events.append(FileEvent(CREATED, path))
        elif before[path] != after[path]:
            events.append(FileEvent(CHANGED, path))
    return events


class ChangeMonitor:
    """Watches ``root`` recursively and queues index updates for artifact changes.

    Only messages are produced here; applying them to the repository is the
    job of the single ``IndexPump`` consuming ``updates``.
    """

    def __init__(
        self,
        root: str,
        kinds: Iterable[ResourceKind],
        uri_builder: UriBuilder,
        updates: "queue.Queue[IndexUpdate]",
        pattern: str = WATCH_PATTERN,
        interval: float = 1.0,
    ) -> None:
        self.root = root
        self.kinds = tuple(kinds)
        self.uri_builder = uri_builder
        self.updates = updates
        self.pattern = pattern
        self.interval = interval
        self.enabled = False
        self._snapshot: dict[str, tuple[int, int]] | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def prime(self) -> None:
        # A root that does not exist yet has nothing to report.
        self._snapshot = _scan(self.root, self.pattern) if os.path.isdir(self.root) else {}

    def poll_once(self) -> list[FileEvent]:
        if self._snapshot is None:
            self.prime()
            return []
        if not self._snapshot and not os.path.isdir(self.root):
            return []
        # On a failed scan the previous snapshot stays in place.
        current = _scan(self.root, self.pattern)
        events = diff_snapshots(self._snapshot, current)
        self._snapshot = current
        for event in events:
            self.on_change(event)
        return events

    def on_change(self, event: FileEvent) -> IndexUpdate | None:
        path = event.path.replace("\\", "/")
        logger.debug("watcher watched %s", path)
        key = self.uri_builder.parse_key(path)
        if key == NIL_KEY:
            return None
        if is_expired(path):
            return None
        kind = match_kind(path, self.kinds)
        if kind is None:
            return None
        logger.debug("New content %s and watched: %s", event.change_type, path)
        if event.change_type == DELETED:
            update = IndexUpdate.remove(key)
        else:
            signature = self.uri_builder.parse_signature(path)
            update = IndexUpdate.add(key, self.uri_builder.build_resource_url(key, signature, kind))
        self.updates.put_nowait(update)
        return update

    def start(self) -> None:
        if self.running:
            return
        logger.debug("Setting up file system watch for %s", self.root)
        if self._snapshot is None:
            self.prime()
        self.enabled = True
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="reduce-store-watch", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self.enabled = False
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            if not self.enabled:
                continue
            try:
                self.poll_once()
            except Exception:
                logger.exception("File system watch failed for %s", self.root)
