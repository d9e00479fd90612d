"""
Dashboard Refresh Coordination

Owns the current DashboardView and rebuilds it from a full refetch whenever
the record table changes:
- One refresh in flight at a time; notifications arriving meanwhile collapse
  into a single follow-up refresh
- A failed fetch is logged and the previous view is kept (stale but
  consistent); before the first success the view is the empty dashboard
- No partial updates: every refresh recomputes every view from scratch
"""

import asyncio
import time
from contextlib import suppress
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol

import structlog
from aiokafka.errors import KafkaError
from prometheus_client import Counter, Histogram

from salesviz.aggregation import (
    ColorAssigner,
    DashboardView,
    PersonDetail,
    compose_dashboard,
    compose_person_detail,
)
from salesviz.aggregation.records import SalesPerson, SalesRecord
from salesviz.config import Settings, get_settings
from salesviz.ingestion.change_feed import ChangeSubscription

logger = structlog.get_logger(__name__)


# =============================================================================
# METRICS
# =============================================================================

REFRESHES = Counter(
    "salesviz_dashboard_refreshes_total",
    "Dashboard refresh attempts",
    ["status"],
)

REFRESH_DURATION = Histogram(
    "salesviz_dashboard_refresh_seconds",
    "Time spent refetching and recomputing the dashboard",
)


class RecordSource(Protocol):
    async def fetch_all(self, sales_person: Optional[str] = None) -> List[SalesRecord]:
        ...

    async def fetch_one(self, name: str) -> Optional[SalesPerson]:
        ...


class DashboardRefresher:
    """
    Keeps the dashboard view in step with the data store.

    Example:
        refresher = DashboardRefresher.from_settings(SalesStore())
        refresher.request_refresh()
        view = await refresher.refresh()
    """

    def __init__(
        self,
        store: RecordSource,
        colors: ColorAssigner,
        top_n: int = 5,
        recent_limit: int = 10,
    ):
        self.store = store
        self.colors = colors
        self.top_n = top_n
        self.recent_limit = recent_limit

        self._view = compose_dashboard([], colors, recent_limit)
        self._refreshed_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._last_detail: Optional[PersonDetail] = None
        self._task: Optional[asyncio.Task] = None
        self._pending = False

    @classmethod
    def from_settings(cls, store: RecordSource, settings: Optional[Settings] = None) -> "DashboardRefresher":
        dashboard = (settings or get_settings()).dashboard
        return cls(
            store,
            ColorAssigner(dashboard.palette, dashboard.salesperson_colors),
            top_n=dashboard.top_n,
            recent_limit=dashboard.recent_limit,
        )

    @property
    def view(self) -> DashboardView:
        return self._view

    @property
    def refreshed_at(self) -> Optional[datetime]:
        """Completion time of the last successful refresh"""
        return self._refreshed_at

    @property
    def last_error(self) -> Optional[str]:
        """Error of the most recent refresh, None if it succeeded"""
        return self._last_error

    @property
    def is_refreshing(self) -> bool:
        return self._task is not None and not self._task.done()

    def request_refresh(self) -> asyncio.Task:
        """
        Schedule a full refetch and recompute.

        If a refresh is already running, one more refresh is queued to run
        after it instead of starting a second one.
        """
        if self.is_refreshing:
            self._pending = True
            return self._task

        self._task = asyncio.create_task(self._refresh_loop())
        return self._task

    async def refresh(self) -> DashboardView:
        """Refresh and return the resulting view (previous view if the fetch failed)"""
        task = self.request_refresh()
        # Shielded so a cancelled caller does not abort the shared refresh
        await asyncio.shield(task)
        return self._view

    async def _refresh_loop(self) -> None:
        while True:
            self._pending = False
            await self._refresh_once()
            if not self._pending:
                return

    async def _refresh_once(self) -> None:
        start = time.perf_counter()
        try:
            records = await self.store.fetch_all()
        except Exception as e:
            self._last_error = str(e) or type(e).__name__
            REFRESHES.labels(status="error").inc()
            logger.error(
                "Failed to fetch sales records, keeping previous view",
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        self._view = compose_dashboard(records, self.colors, self.recent_limit)
        self._refreshed_at = datetime.now(timezone.utc)
        self._last_error = None

        duration = time.perf_counter() - start
        REFRESHES.labels(status="success").inc()
        REFRESH_DURATION.observe(duration)
        logger.info(
            "Dashboard refreshed",
            records=self._view.kpis.order_count,
            duration_ms=round(duration * 1000, 2),
        )

    async def load_person(self, name: str) -> PersonDetail:
        """
        Detail view for one salesperson from a narrower refetch.

        On fetch failure the last detail for the same person is returned, or
        an empty detail if there is none.
        """
        try:
            records = await self.store.fetch_all(sales_person=name)
            person = await self.store.fetch_one(name)
        except Exception as e:
            logger.error(
                "Failed to fetch salesperson data",
                name=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            if self._last_detail is not None and self._last_detail.summary.name == name:
                return self._last_detail
            return compose_person_detail(name, [], None, self.colors, self.top_n)

        detail = compose_person_detail(name, records, person, self.colors, self.top_n)
        self._last_detail = detail
        return detail

    async def close(self) -> None:
        """Cancel any in-flight refresh"""
        if self.is_refreshing:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
        self._task = None


async def watch_changes(
    refresher: DashboardRefresher,
    subscription_factory: Callable[[], ChangeSubscription] = ChangeSubscription,
    reconnect_delay: Optional[float] = None,
) -> None:
    """
    Refresh the dashboard on every record change notification.

    Runs until cancelled. Subscription failures are logged and the
    subscription is reopened after ``reconnect_delay`` seconds; the dashboard
    keeps serving its last view meanwhile.
    """
    if reconnect_delay is None:
        reconnect_delay = get_settings().kafka.reconnect_delay_seconds

    while True:
        try:
            async with subscription_factory() as subscription:
                # Changes may have been missed while unsubscribed
                refresher.request_refresh()
                async for _ in subscription:
                    refresher.request_refresh()
            logger.warning("Change notification stream ended")
        except KafkaError as e:
            logger.error("Change subscription failed", error=str(e), error_type=type(e).__name__)
        except Exception as e:
            logger.exception("Unexpected error in change watcher", error=str(e), error_type=type(e).__name__)

        await asyncio.sleep(reconnect_delay)
