"""Mapping between artifact URLs and files under the storage root."""

from __future__ import annotations

import os
import uuid

from reduce_store.errors import StorageRootNotConfigured
from reduce_store.naming.uri_builder import UriBuilder, compact_key


EXPIRED_MARKER = "Expired"


def split_file_name(path: str) -> tuple[str, str]:
    idx = max(path.rfind("/"), path.rfind("\\"))
    return path[: idx + 1], path[idx + 1:]


def is_expired(path: str) -> bool:
    return EXPIRED_MARKER in split_file_name(path)[1]


def expired_before_signature(path: str, signature: str) -> str | None:
    """Insert ``Expired-`` right before the signature token of the file name."""
    if not signature:
        return None
    head, name = split_file_name(path)
    start = name.find("-") + 1
    idx = name.lower().find(signature.lower(), start)
    if idx < 0:
        return None
    return f"{head}{name[:idx]}{EXPIRED_MARKER}-{name[idx:]}"


def expired_at_last_dash(path: str) -> str | None:
    """Insert ``-Expired`` at the last dash of the file name."""
    head, name = split_file_name(path)
    idx = name.rfind("-")
    if idx < 0:
        return None
    return f"{head}{name[:idx]}-{EXPIRED_MARKER}{name[idx:]}"


def expired_after_key(path: str, key: uuid.UUID) -> str:
    """Append ``-Expired`` to the compact key inside the file name."""
    head, name = split_file_name(path)
    compact = compact_key(key)
    return f"{head}{name.replace(compact, f'{compact}-{EXPIRED_MARKER}')}"


class PathMapper:
    def __init__(self, storage_root: str, uri_builder: UriBuilder) -> None:
        self.storage_root = storage_root
        self.uri_builder = uri_builder

    @property
    def configured(self) -> bool:
        return bool(self.storage_root)

    def path_for(self, url: str) -> str:
        if url.endswith("/"):
            return url
        idx = url.rfind("/")
        if idx < 0:
            return url
        if not self.storage_root:
            raise StorageRootNotConfigured("storage root is not configured")
        return os.path.join(self.storage_root, url[idx + 1:].lower())

    def identifier_for(self, path: str) -> uuid.UUID:
        return self.uri_builder.parse_key(path.replace("\\", "/"))

    def signature_for(self, path: str) -> str:
        return self.uri_builder.parse_signature(path.replace("\\", "/"))
