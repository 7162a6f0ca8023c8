"""Disk-backed store for reduced CSS, JavaScript and sprite artifacts."""

from __future__ import annotations

import logging
import queue
from typing import Iterable
import uuid

from reduce_store.config import StoreConfig
from reduce_store.index.base import ReductionRepository
from reduce_store.index.channel import IndexPump, IndexUpdate
from reduce_store.naming.uri_builder import NIL_KEY, UriBuilder, compact_key
from reduce_store.resources.base import ResourceKind, is_image_url, match_kind
from reduce_store.resources.registry import DEFAULT_KINDS
from reduce_store.storage.files import DatedFile, FileWrapper
from reduce_store.storage.paths import (
    EXPIRED_MARKER,
    PathMapper,
    expired_after_key,
    expired_at_last_dash,
    expired_before_signature,
)
from reduce_store.storage.sinks import ResponseSink
from reduce_store.watch.monitor import WATCH_PATTERN, ChangeMonitor


logger = logging.getLogger(__name__)


class LocalDiskStore:
    """Saves, serves and expires artifacts under ``config.storage_root``.

    Files are never deleted by a flush. They are renamed to an expired
    variant so a request that resolved the old URL can still be answered
    until the replacement is written.
    """

    def __init__(
        self,
        config: StoreConfig,
        uri_builder: UriBuilder,
        repository: ReductionRepository | None,
        kinds: Iterable[ResourceKind] = DEFAULT_KINDS,
        file_wrapper: FileWrapper | None = None,
    ) -> None:
        self.config = config
        self.uri_builder = uri_builder
        self.repository = repository
        self.kinds: tuple[ResourceKind, ...] = tuple(kinds)
        self.file_wrapper = file_wrapper or FileWrapper()
        self.paths = PathMapper(config.storage_root, uri_builder)
        self.updates: "queue.Queue[IndexUpdate]" = queue.Queue()
        self.monitor: ChangeMonitor | None = None
        self.pump: IndexPump | None = None
        if config.watch_enabled:
            self._setup_watcher()

    @property
    def storage_root(self) -> str:
        return self.paths.storage_root

    def __enter__(self) -> "LocalDiskStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _setup_watcher(self) -> None:
        if not self.storage_root or self.repository is None:
            return
        logger.debug("Setting up file system watcher for %s", self.storage_root)
        self.monitor = ChangeMonitor(
            self.storage_root,
            self.kinds,
            self.uri_builder,
            self.updates,
            pattern=WATCH_PATTERN,
            interval=self.config.poll_seconds,
        )
        self.pump = IndexPump(self.repository, self.updates)
        self.pump.start()
        self.monitor.start()

    def _shutdown_watcher(self) -> None:
        monitor, pump = self.monitor, self.pump
        self.monitor = None
        self.pump = None
        try:
            if monitor is not None:
                monitor.stop()
        finally:
            if pump is not None:
                pump.stop()

    def reconfigure(self, storage_root: str) -> None:
        """Point the store at a new storage root, re-creating the watch."""
        self._shutdown_watcher()
        self.config = self.config.with_storage_root(storage_root)
        self.paths = PathMapper(storage_root, self.uri_builder)
        if self.config.watch_enabled:
            self._setup_watcher()

    def save(self, content: bytes, url: str, original_urls: str = "") -> None:
        path = self.paths.path_for(url)
        signature = self.uri_builder.parse_signature(url)
        key = self.uri_builder.parse_key(url)
        self.file_wrapper.save(content, path)
        if self.repository is not None and not is_image_url(url, self.kinds):
            self.repository.add(key, url)
        logger.debug("%s saved to disk.", url)
        expired = expired_before_signature(path, signature)
        if expired and self.file_wrapper.exists(expired):
            self.file_wrapper.delete(expired)

    def send_content(self, url: str, sink: ResponseSink) -> bool:
        if not self.paths.configured:
            return False
        path = self.paths.path_for(url)
        try:
            sink.transmit_file(path)
            logger.debug("%s transmitted from disk.", url)
            return True
        except FileNotFoundError:
            expired = expired_at_last_dash(path)
            if expired is None:
                return False
            try:
                sink.transmit_file(expired)
                logger.debug("%s was expired and transmitted from disk.", url)
                return True
            except FileNotFoundError:
                return False

    def list_active(self) -> dict[uuid.UUID, str]:
        logger.debug("Looking for previously saved content.")
        if not self.storage_root:
            return {}
        newest: dict[uuid.UUID, tuple[DatedFile, ResourceKind]] = {}
        for dated in self.file_wrapper.list_dated_files(self.storage_root, WATCH_PATTERN):
            if f"-{EXPIRED_MARKER}-" in dated.file_name:
                continue
            key = self.paths.identifier_for(dated.file_name)
            if key == NIL_KEY:
                continue
            kind = match_kind(dated.file_name, self.kinds)
            if kind is None:
                continue
            current = newest.get(key)
            if current is None or _newer(dated, current[0]):
                newest[key] = (dated, kind)
        return {
            key: self.uri_builder.build_resource_url(key, self.paths.signature_for(dated.file_name), kind)
            for key, (dated, kind) in newest.items()
        }

    def flush(self, key: uuid.UUID | None) -> None:
        if key is None:
            key = NIL_KEY
        if key == NIL_KEY:
            for active_key in self.list_active():
                self.flush(active_key)

        if self.repository is not None:
            self.repository.remove(key)
        if not self.storage_root:
            return
        compact = compact_key(key)
        for path in self.file_wrapper.list_files(self.storage_root):
            name = path.replace("\\", "/").rsplit("/", 1)[-1]
            if compact in name and EXPIRED_MARKER not in name:
                self.file_wrapper.rename(path, expired_after_key(path, key))
        logger.debug("Flushed %s.", key)

    def url_for_key(self, key: uuid.UUID, kind: ResourceKind) -> str | None:
        return None

    def close(self) -> None:
        self._shutdown_watcher()
        logger.debug("Local disk store disposed.")


def _newer(candidate: DatedFile, current: DatedFile) -> bool:
    return (candidate.created_at, candidate.file_name) > (current.created_at, current.file_name)
