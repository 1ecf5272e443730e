"""Sync manager - drives fetch -> normalize -> cache -> in-memory window.

One manager per app session. Front ends call the ``on_*`` hooks for search
input, end-of-list and pull-to-refresh, then read ``items`` and
``total_count`` back.

Only one page load is ever in flight. End-of-list and pull-to-refresh
triggers that arrive while a load is running are dropped; the front end
re-triggers end-of-list on its next scroll event. Search changes are
debounced, and each one bumps a generation counter so a response to a
superseded query is discarded instead of overwriting the newer results.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..errors import NetworkError, PersistenceError
from ..normalizer import normalize_many
from ..schemas import Customer, CustomerPage

if TYPE_CHECKING:
    from ..api.customers import CustomersAPI
    from ..cache.store import CustomerCache

logger = logging.getLogger(__name__)


class LoadOutcome(str, Enum):
    LOADED = "loaded"
    FALLBACK = "fallback"
    REJECTED = "rejected"
    STALE = "stale"
    SKIPPED = "skipped"
    SCHEDULED = "scheduled"


@dataclass
class LoadResult:
    """What a manager operation did.

    ``applied`` counts customers placed into ``items`` (for a fallback, the
    whole cache). ``dropped`` counts raw records rejected by the normalizer.
    ``error`` holds the absorbed failure for FALLBACK results.
    """

    outcome: LoadOutcome
    page: int | None = None
    applied: int = 0
    dropped: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is LoadOutcome.LOADED


class SyncManager:
    """Pagination, search and offline-fallback state for the customer list."""

    def __init__(
        self,
        fetcher: "CustomersAPI",
        cache: "CustomerCache",
        page_size: int = 50,
        debounce_seconds: float = 0.5,
        search_query: str = "",
        sort_by: str = "",
        filter_by: str = "",
        discard_stale: bool = True,
    ):
        self._fetcher = fetcher
        self._cache = cache
        self.page_size = page_size
        self.debounce_seconds = debounce_seconds
        self.sort_by = sort_by
        self.filter_by = filter_by
        self.discard_stale = discard_stale

        self.search_query = search_query
        self.current_page = 1
        self.total_count = 0
        self.items: list[Customer] = []
        self.loading = False
        self.refreshing = False

        self._generation = 0
        self._pending_reset: asyncio.Task | None = None
        self._reset_in_flight: asyncio.Task | None = None
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def has_more(self) -> bool:
        return len(self.items) < self.total_count

    @property
    def pending_reset(self) -> asyncio.Task | None:
        """The scheduled debounced search reset, if any."""
        return self._pending_reset

    # =========================================================================
    # Loading
    # =========================================================================

    async def load_page(self, page: int = 1, is_refresh: bool = False) -> LoadResult:
        """Fetch ``page`` and apply it to ``items``.

        No-op while another load is in flight. On a network failure the whole
        cache replaces ``items``; ``total_count`` keeps its last value.
        """
        if self.loading:
            logger.debug("Load of page %s skipped, another load is in flight", page)
            return LoadResult(LoadOutcome.SKIPPED, page=page)

        self.loading = True
        self._idle.clear()
        generation = self._generation
        try:
            try:
                response = await self._fetcher.fetch_page(
                    page,
                    self.page_size,
                    self.search_query,
                    self.sort_by,
                    self.filter_by,
                )
            except NetworkError as e:
                logger.warning("Fetching customer page %s failed, using cache: %s", page, e)
                return await self._fall_back(page, e)
            return await self._apply(response, page, is_refresh, generation)
        finally:
            self.loading = False
            self.refreshing = False
            self._idle.set()

    async def _apply(
        self,
        response: CustomerPage,
        page: int,
        is_refresh: bool,
        generation: int,
    ) -> LoadResult:
        if not response.success or response.data is None or response.data.customers is None:
            logger.info("Customer page %s returned no data (success=%s)", page, response.success)
            return LoadResult(LoadOutcome.REJECTED, page=page)

        raw = response.customers
        customers = normalize_many(raw)
        dropped = len(raw) - len(customers)

        try:
            await self._cache.upsert_many(customers)
        except PersistenceError as e:
            logger.warning("Could not cache customer page %s: %s", page, e)

        if self.discard_stale and generation != self._generation:
            logger.info("Discarding customer page %s for superseded search", page)
            return LoadResult(LoadOutcome.STALE, page=page, dropped=dropped)

        self.total_count = response.count
        if is_refresh:
            self.items = list(customers)
        else:
            self.items = [*self.items, *customers]
        self.current_page = page

        logger.debug(
            "Loaded customer page %s: %d customers, %d dropped, %d total",
            page, len(customers), dropped, self.total_count,
        )
        return LoadResult(LoadOutcome.LOADED, page=page, applied=len(customers), dropped=dropped)

    async def _fall_back(self, page: int, error: NetworkError) -> LoadResult:
        try:
            cached = await self._cache.get_all()
        except PersistenceError as e:
            logger.warning("Customer cache unavailable for fallback: %s", e)
            cached = []
        self.items = cached
        return LoadResult(LoadOutcome.FALLBACK, page=page, applied=len(cached), error=error)

    # =========================================================================
    # Front-end hooks
    # =========================================================================

    def on_search_change(self, query: str) -> LoadResult:
        """Record new search text and (re)schedule the debounced reset.

        Must be called from inside a running event loop.
        """
        self.search_query = query
        self._generation += 1
        self._cancel_pending_reset()
        self._pending_reset = asyncio.create_task(self._debounced_reset())
        return LoadResult(LoadOutcome.SCHEDULED, page=1)

    async def _debounced_reset(self) -> LoadResult:
        await asyncio.sleep(self.debounce_seconds)
        while self.discard_stale and self.loading:
            await self._idle.wait()
        # From here on the reset is not cancelled by newer search changes.
        task = asyncio.current_task()
        self._reset_in_flight = task
        try:
            self.current_page = 1
            return await self.load_page(1, is_refresh=True)
        finally:
            if self._reset_in_flight is task:
                self._reset_in_flight = None

    async def on_reach_end(self) -> LoadResult:
        """Load the next page if more customers are known to exist."""
        if self.loading or not self.has_more:
            return LoadResult(LoadOutcome.SKIPPED, page=self.current_page + 1)
        return await self.load_page(self.current_page + 1, is_refresh=False)

    async def on_pull_to_refresh(self) -> LoadResult:
        self.refreshing = True
        return await self.load_page(1, is_refresh=True)

    def _cancel_pending_reset(self) -> None:
        """Cancel the previous reset if it is still debouncing or waiting for idle."""
        task = self._pending_reset
        if task is not None and not task.done() and task is not self._reset_in_flight:
            task.cancel()
        self._pending_reset = None

    def close(self) -> None:
        """Cancel a debounced search reset that has not started fetching."""
        self._cancel_pending_reset()
