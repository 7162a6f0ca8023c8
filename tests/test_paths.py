import os
import uuid

import pytest

from reduce_store.errors import StorageRootNotConfigured
from reduce_store.naming.uri_builder import UriBuilder
from reduce_store.storage.paths import (
    PathMapper,
    expired_after_key,
    expired_at_last_dash,
    expired_before_signature,
    is_expired,
)

KEY = uuid.UUID("3fa85f64-5717-4562-b3fc-2c963f66afa6")


URL = "/RequestReduceContent/3fa85f6457174562b3fc2c963f66afa6-abc123.RequestReducedStyle.css"


def test_path_for_joins_lowercased_file_name():
    mapper = PathMapper("/var/Store", UriBuilder())
    assert mapper.path_for(URL) == os.path.join(
        "/var/Store", "3fa85f6457174562b3fc2c963f66afa6-abc123.requestreducedstyle.css"
    )


def test_path_for_passes_directories_through():
    mapper = PathMapper("/var/store", UriBuilder())
    assert mapper.path_for("/RequestReduceContent/") == "/RequestReduceContent/"
    assert mapper.path_for("plainname.css") == "plainname.css"


def test_path_for_without_root():
    mapper = PathMapper("", UriBuilder())
    with pytest.raises(StorageRootNotConfigured):
        mapper.path_for(URL)


def test_identifier_and_signature_for_path():
    mapper = PathMapper("/var/store", UriBuilder())
    path = mapper.path_for(URL)
    assert mapper.identifier_for(path) == KEY
    assert mapper.signature_for(path) == "abc123"


def test_expired_rules_agree_on_artifact_names():
    path = "/var/store/3fa85f6457174562b3fc2c963f66afa6-abc123.requestreducedstyle.css"
    expected = "/var/store/3fa85f6457174562b3fc2c963f66afa6-Expired-abc123.requestreducedstyle.css"
    assert expired_before_signature(path, "abc123") == expected
    assert expired_at_last_dash(path) == expected
    assert expired_after_key(path, KEY) == expected
    assert is_expired(expected)
    assert not is_expired(path)


def test_expired_rules_only_touch_the_file_name():
    path = "/var/my-store/3fa85f6457174562b3fc2c963f66afa6-abc123.requestreducedstyle.css"
    assert expired_at_last_dash(path).startswith("/var/my-store/")
    assert expired_at_last_dash("/var/my-store/plain.css") is None
    assert expired_before_signature(path, "zzz") is None
    assert expired_before_signature(path, "") is None
