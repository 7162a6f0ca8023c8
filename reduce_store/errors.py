"""Store exceptions."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for store errors."""


class StorageRootNotConfigured(StoreError):
    """An operation needed a storage root and none is configured."""
