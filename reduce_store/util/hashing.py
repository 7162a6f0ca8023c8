"""Hash helpers."""

from __future__ import annotations

import hashlib


SIGNATURE_LENGTH = 32


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def content_signature(data: bytes) -> str:
    """Short content token embedded in artifact file names."""
    return sha256_bytes(data)[:SIGNATURE_LENGTH]
