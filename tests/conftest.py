import uuid

import pytest

from reduce_store.config import StoreConfig
from reduce_store.index.base import InMemoryReductionRepository
from reduce_store.naming.uri_builder import UriBuilder
from reduce_store.storage.disk_store import LocalDiskStore




class RecordingRepository(InMemoryReductionRepository):
    def __init__(self) -> None:
        super().__init__()
        self.added: list[tuple[uuid.UUID, str]] = []
        self.removed: list[uuid.UUID] = []

    def add(self, key, url):
        self.added.append((key, url))
        super().add(key, url)

    def remove(self, key):
        self.removed.append(key)
        super().remove(key)


@pytest.fixture
def repository():
    return RecordingRepository()


@pytest.fixture
def uri_builder():
    return UriBuilder()


@pytest.fixture
def store(tmp_path, uri_builder, repository):
    config = StoreConfig(storage_root=str(tmp_path / "store"))
    with LocalDiskStore(config, uri_builder, repository) as store:
        yield store
