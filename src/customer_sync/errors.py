"""Error taxonomy for customer sync.

Every failure is absorbed at the layer where it happens:

- ``ValidationError`` names a malformed API record. ``normalize`` never raises
  it; the record is dropped and logged.
- ``NetworkError`` is raised by the fetcher and turned into a cache fallback
  by the sync manager.
- ``PersistenceError`` is raised by the cache store for whole-operation
  failures. Single-record failures inside a batch are skipped by the store.
- ``SchemaMismatchError`` is logged by the cache store before it rebuilds
  its tables.
"""

from __future__ import annotations


class CustomerSyncError(Exception):
    """Base class for customer sync errors."""


class ValidationError(CustomerSyncError):
    """A raw customer record could not be normalized."""

    def __init__(self, message: str, raw: object = None):
        super().__init__(message)
        self.raw = raw


class NetworkError(CustomerSyncError):
    """Fetching a customer page failed (transport, HTTP status or body)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceError(CustomerSyncError):
    """The local customer cache could not be read or written."""


class SchemaMismatchError(CustomerSyncError):
    """The cache on disk was written with a different schema version."""

    def __init__(self, found: str | None, expected: int):
        super().__init__(
            f"Customer cache schema version {found!r} does not match expected {expected}"
        )
        self.found = found
        self.expected = expected
