"""Resource kind descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class ResourceKind:
    name: str
    file_name: str
    content_type: str
    is_image: bool = False

    @property
    def extension(self) -> str:
        idx = self.file_name.rfind(".")
        return self.file_name[idx:].lower() if idx > -1 else ""

    def matches(self, file_name: str) -> bool:
        return file_name.lower().endswith(self.file_name.lower())


def match_kind(file_name: str, kinds: Iterable[ResourceKind]) -> ResourceKind | None:
    """Return the single kind whose file name suffixes ``file_name``.

    Ambiguous matches are treated like no match.
    """
    matched = [kind for kind in kinds if kind.matches(file_name)]
    if len(matched) != 1:
        return None
    return matched[0]


def is_image_url(url: str, kinds: Iterable[ResourceKind]) -> bool:
    lowered = url.lower()
    return any(kind.is_image and kind.extension and lowered.endswith(kind.extension) for kind in kinds)
