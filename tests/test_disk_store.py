from datetime import datetime
import os
import uuid

import pytest

from reduce_store.config import StoreConfig
from reduce_store.naming.uri_builder import NIL_KEY
from reduce_store.resources.registry import CSS, JAVASCRIPT
from reduce_store.storage.disk_store import LocalDiskStore
from reduce_store.storage.files import DatedFile, FileWrapper
from reduce_store.storage.sinks import BufferSink

KEY = uuid.UUID("3fa85f64-5717-4562-b3fc-2c963f66afa6")


URL = "/RequestReduceContent/3fa85f6457174562b3fc2c963f66afa6-abc123.RequestReducedStyle.css"
ACTIVE_NAME = "3fa85f6457174562b3fc2c963f66afa6-abc123.requestreducedstyle.css"
EXPIRED_NAME = "3fa85f6457174562b3fc2c963f66afa6-Expired-abc123.requestreducedstyle.css"


def test_save_writes_file_and_updates_index(store, repository):
    store.save(b"body{}", URL, "")
    with open(os.path.join(store.storage_root, ACTIVE_NAME), "rb") as handle:
        assert handle.read() == b"body{}"
    assert repository.get(KEY) == URL


def test_save_then_send(store):
    store.save(b"body{}", URL, "")
    sink = BufferSink()
    assert store.send_content(URL, sink) is True
    assert sink.content == b"body{}"
    assert sink.path.endswith(ACTIVE_NAME)


def test_flush_then_send_falls_back_to_expired(store, repository):
    store.save(b"body{}", URL, "")
    store.flush(KEY)
    root = store.storage_root
    assert not os.path.exists(os.path.join(root, ACTIVE_NAME))
    assert os.path.exists(os.path.join(root, EXPIRED_NAME))
    assert KEY not in repository

    sink = BufferSink()
    assert store.send_content(URL, sink) is True
    assert sink.content == b"body{}"
    assert sink.path.endswith(EXPIRED_NAME)


def test_send_missing_artifact(store):
    sink = BufferSink()
    assert store.send_content(URL, sink) is False
    assert sink.content is None


def test_send_without_storage_root(uri_builder, repository):
    store = LocalDiskStore(StoreConfig(), uri_builder, repository)
    assert store.send_content(URL, BufferSink()) is False


def test_save_removes_expired_twin(store):
    store.save(b"body{}", URL, "")
    store.flush(KEY)
    store.save(b"body{}", URL, "")
    root = store.storage_root
    assert os.path.exists(os.path.join(root, ACTIVE_NAME))
    assert not os.path.exists(os.path.join(root, EXPIRED_NAME))


def test_save_image_skips_index(store, repository):
    store.save(b"\x89PNG", "http://x/a.png", "")
    store.save(b"\x89PNG", "http://x/B.PNG", "")
    assert repository.added == []
    assert os.path.exists(os.path.join(store.storage_root, "a.png"))


def test_failed_write_leaves_index_untouched(tmp_path, uri_builder, repository):
    class BrokenFiles(FileWrapper):
        def save(self, content, path):
            raise PermissionError(path)

    store = LocalDiskStore(StoreConfig(storage_root=str(tmp_path)), uri_builder, repository, file_wrapper=BrokenFiles())
    with pytest.raises(PermissionError):
        store.save(b"body{}", URL, "")
    assert repository.added == []


def test_list_active_skips_expired_and_unknown_files(store, uri_builder):
    other = uuid.uuid4()
    script_url = uri_builder.build_resource_url(other, "def456", JAVASCRIPT)
    store.save(b"body{}", URL, "")
    store.save(b"var a;", script_url, "")
    store.flush(other)
    root = store.storage_root
    with open(os.path.join(root, "notes-RequestReduce.txt"), "wb") as handle:
        handle.write(b"x")
    with open(os.path.join(root, f"{uuid.uuid4().hex}-aa.RequestReduce.txt"), "wb") as handle:
        handle.write(b"x")

    assert store.list_active() == {KEY: uri_builder.build_resource_url(KEY, "abc123", CSS)}


def test_list_active_keeps_newest_file_per_key(tmp_path, uri_builder, repository):
    older = str(tmp_path / f"{KEY.hex}-aaa.requestreducedstyle.css")
    newer = str(tmp_path / f"{KEY.hex}-bbb.requestreducedstyle.css")
    tied = str(tmp_path / f"{KEY.hex}-ccc.requestreducedstyle.css")

    class DatedFiles(FileWrapper):
        def list_dated_files(self, root, pattern):
            return [
                DatedFile(newer, datetime(2024, 1, 2)),
                DatedFile(older, datetime(2024, 1, 1)),
                DatedFile(tied, datetime(2024, 1, 2)),
            ]

    store = LocalDiskStore(
        StoreConfig(storage_root=str(tmp_path)), uri_builder, repository, file_wrapper=DatedFiles()
    )
    assert store.list_active() == {KEY: uri_builder.build_resource_url(KEY, "ccc", CSS)}


def test_list_active_without_storage_root(uri_builder, repository):
    store = LocalDiskStore(StoreConfig(), uri_builder, repository)
    assert store.list_active() == {}


def test_flush_everything(store, repository, uri_builder):
    other = uuid.uuid4()
    store.save(b"body{}", URL, "")
    store.save(b"var a;", uri_builder.build_resource_url(other, "def456", JAVASCRIPT), "")
    store.flush(NIL_KEY)

    assert set(repository.removed[:2]) == {KEY, other}
    assert repository.removed[-1] == NIL_KEY
    assert len(repository) == 0
    names = sorted(os.listdir(store.storage_root))
    assert all("-Expired-" in name for name in names)
    assert store.list_active() == {}


def test_flush_none_means_everything(store, repository):
    store.save(b"body{}", URL, "")
    store.flush(None)
    assert repository.removed == [KEY, NIL_KEY]


def test_flush_leaves_other_keys_alone(store, repository, uri_builder):
    other = uuid.uuid4()
    other_url = uri_builder.build_resource_url(other, "def456", CSS)
    store.save(b"body{}", URL, "")
    store.save(b"p{}", other_url, "")
    store.flush(KEY)
    assert repository.get(other) == other_url
    assert store.list_active() == {other: other_url}


def test_url_for_key_is_not_supported(store):
    assert store.url_for_key(KEY, CSS) is None


def test_failed_rename_propagates_after_index_removal(tmp_path, uri_builder, repository):
    class LockedFiles(FileWrapper):
        def rename(self, old_path, new_path):
            raise PermissionError(old_path)

    store = LocalDiskStore(StoreConfig(storage_root=str(tmp_path)), uri_builder, repository, file_wrapper=LockedFiles())
    store.save(b"body{}", URL, "")
    with pytest.raises(PermissionError):
        store.flush(KEY)
    assert repository.removed == [KEY]
    assert os.path.exists(os.path.join(str(tmp_path), ACTIVE_NAME))
    assert not os.path.exists(os.path.join(str(tmp_path), EXPIRED_NAME))


def test_failed_twin_delete_propagates_after_index_update(tmp_path, uri_builder, repository):
    class UndeletableFiles(FileWrapper):
        def delete(self, path):
            raise PermissionError(path)

    store = LocalDiskStore(
        StoreConfig(storage_root=str(tmp_path)), uri_builder, repository, file_wrapper=UndeletableFiles()
    )
    store.save(b"body{}", URL, "")
    store.flush(KEY)
    with pytest.raises(PermissionError):
        store.save(b"body{}", URL, "")
    assert repository.added == [(KEY, URL), (KEY, URL)]
    assert os.path.exists(os.path.join(str(tmp_path), ACTIVE_NAME))
    assert os.path.exists(os.path.join(str(tmp_path), EXPIRED_NAME))
