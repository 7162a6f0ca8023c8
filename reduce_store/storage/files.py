"""Low-level file operations used by the store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import fnmatch
import os
from pathlib import Path
import tempfile
from typing import Iterator


@dataclass(frozen=True)
class DatedFile:
    file_name: str
    created_at: datetime


def matches_pattern(name: str, pattern: str) -> bool:
    return fnmatch.fnmatch(name.lower(), pattern.lower())


class FileWrapper:
    def save(self, content: bytes, path: str) -> None:
        dest = Path(path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".staging-", suffix=".tmp", dir=str(dest.parent))
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            os.replace(tmp_path, dest)
            tmp_path = None
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def delete(self, path: str) -> None:
        os.remove(path)

    def rename(self, old_path: str, new_path: str) -> None:
        os.replace(old_path, new_path)

    def list_files(self, root: str) -> list[str]:
        return list(self._walk(root))

    def list_dated_files(self, root: str, pattern: str) -> list[DatedFile]:
        dated = []
        for path in self._walk(root):
            if not matches_pattern(os.path.basename(path), pattern):
                continue
            try:
                stat = os.stat(path)
            except FileNotFoundError:
                continue
            dated.append(DatedFile(file_name=path, created_at=datetime.fromtimestamp(stat.st_ctime)))
        return dated

    @staticmethod
    def _walk(root: str) -> Iterator[str]:
        for dirpath, _dirnames, filenames in os.walk(root):
            for filename in filenames:
                yield os.path.join(dirpath, filename)
