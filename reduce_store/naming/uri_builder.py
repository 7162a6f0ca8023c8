"""URL and key codec for stored artifacts.

Artifact file names are ``<key hex>-<signature>.<kind file name>``, e.g.
``3fa85f6457174562b3fc2c963f66afa6-abc123.RequestReducedStyle.css``.
"""

from __future__ import annotations

import re
import uuid

from reduce_store.config import DEFAULT_VIRTUAL_PATH
from reduce_store.resources.base import ResourceKind


NIL_KEY = uuid.UUID(int=0)

_KEY_RE = re.compile(r"^[0-9a-fA-F]{32}$")
_SIGNATURE_RE = re.compile(r"^(?:expired-)?(?P<signature>[^.\-]+)", re.IGNORECASE)


def compact_key(key: uuid.UUID) -> str:
    return key.hex


class UriBuilder:
    def __init__(self, content_host: str = "", virtual_path: str = DEFAULT_VIRTUAL_PATH) -> None:
        self.content_host = content_host.rstrip("/")
        self.virtual_path = virtual_path.rstrip("/")

    def build_resource_url(self, key: uuid.UUID, signature: str, kind: ResourceKind) -> str:
        return f"{self.content_host}{self.virtual_path}/{compact_key(key)}-{signature}.{kind.file_name}"

    @staticmethod
    def parse_file_name(url: str) -> str:
        url = url.replace("\\", "/")
        idx = url.rfind("/")
        return url[idx + 1:] if idx > -1 else url

    def parse_key(self, url: str) -> uuid.UUID:
        file_name = self.parse_file_name(url)
        idx = file_name.find("-")
        if idx < 0:
            return NIL_KEY
        token = file_name[:idx]
        if not _KEY_RE.match(token):
            return NIL_KEY
        return uuid.UUID(hex=token)

    def parse_signature(self, url: str) -> str:
        file_name = self.parse_file_name(url)
        idx = file_name.find("-")
        if idx < 0:
            return ""
        match = _SIGNATURE_RE.match(file_name[idx + 1:])
        return match.group("signature") if match else ""
