"""Customer list synchronization."""

from .manager import LoadOutcome, LoadResult, SyncManager

__all__ = ["LoadOutcome", "LoadResult", "SyncManager"]
