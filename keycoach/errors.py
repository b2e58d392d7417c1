"""Exceptions raised by keycoach components."""

from __future__ import annotations


class KeycoachError(Exception):
    """Base class for keycoach failures."""


class CatalogLoadError(KeycoachError):
    """The shortcut catalog source could not be read."""


class LedgerPersistenceError(KeycoachError):
    """A learned-ledger mutation could not be written to durable storage."""


class StorageError(KeycoachError):
    """The slot store could not be opened or holds unreadable data."""
