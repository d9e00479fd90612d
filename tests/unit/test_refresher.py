"""
Unit Tests - Dashboard Refresh Coordination
"""
import asyncio
from decimal import Decimal

import pytest
from aiokafka.errors import KafkaConnectionError

from salesviz.serving.refresher import DashboardRefresher, watch_changes


class GatedStore:
    """Store whose record fetches block until the gate opens"""

    def __init__(self, inner):
        self.inner = inner
        self.gate = asyncio.Event()

    async def fetch_all(self, sales_person=None):
        await self.gate.wait()
        return await self.inner.fetch_all(sales_person)

    async def fetch_one(self, name):
        return await self.inner.fetch_one(name)


class SpyRefresher:
    def __init__(self):
        self.requests = 0

    def request_refresh(self):
        self.requests += 1


class FakeSubscription:
    """Async-context-managed notification source"""

    def __init__(self, notifications=0, fail=None, endless=True):
        self.notifications = notifications
        self.fail = fail
        self.endless = endless
        self.closed = False

    async def __aenter__(self):
        if self.fail is not None:
            raise self.fail
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    def __aiter__(self):
        return self._notifications()

    async def _notifications(self):
        for _ in range(self.notifications):
            yield object()
        if self.endless:
            await asyncio.Event().wait()


async def _wait_until(condition, attempts=200):
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


async def _cancel(task):
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


class TestDashboardRefresher:
    """Tests for DashboardRefresher"""

    async def test_initial_view_is_empty(self, fake_store, colors):
        refresher = DashboardRefresher(fake_store, colors)

        assert refresher.view.kpis.order_count == 0
        assert refresher.refreshed_at is None
        assert fake_store.fetch_all_calls == 0

    async def test_refresh_builds_view(self, fake_store, colors):
        refresher = DashboardRefresher(fake_store, colors)

        view = await refresher.refresh()

        assert view.kpis.total_sales == Decimal("850")
        assert refresher.refreshed_at is not None
        assert refresher.last_error is None

    async def test_failed_refresh_keeps_previous_view(self, fake_store, colors):
        """Test a failed fetch leaves the last good view in place"""
        refresher = DashboardRefresher(fake_store, colors)
        good = await refresher.refresh()

        fake_store.fail_with = ConnectionError("db down")
        view = await refresher.refresh()

        assert view is good
        assert refresher.last_error == "db down"

    async def test_failure_before_first_success_serves_empty_view(self, fake_store, colors):
        fake_store.fail_with = ConnectionError("db down")
        refresher = DashboardRefresher(fake_store, colors)

        view = await refresher.refresh()

        assert view.kpis.total_sales == Decimal("0")
        assert refresher.refreshed_at is None

    async def test_recovers_after_failure(self, fake_store, colors):
        refresher = DashboardRefresher(fake_store, colors)
        fake_store.fail_with = ConnectionError("db down")
        await refresher.refresh()

        fake_store.fail_with = None
        view = await refresher.refresh()

        assert view.kpis.order_count == 6
        assert refresher.last_error is None

    async def test_requests_during_refresh_coalesce(self, fake_store, colors):
        """Test many requests while in flight cause exactly one more refresh"""
        store = GatedStore(fake_store)
        refresher = DashboardRefresher(store, colors)

        first = refresher.request_refresh()
        await asyncio.sleep(0)
        second = refresher.request_refresh()
        third = refresher.request_refresh()

        assert second is first
        assert third is first

        store.gate.set()
        await first

        assert fake_store.fetch_all_calls == 2
        assert not refresher.is_refreshing

    async def test_refresh_after_completion_starts_new_run(self, fake_store, colors):
        refresher = DashboardRefresher(fake_store, colors)
        first = refresher.request_refresh()
        await first

        second = refresher.request_refresh()
        await second

        assert second is not first
        assert fake_store.fetch_all_calls == 2

    async def test_latest_view_reflects_latest_data(self, fake_store, make_record, colors):
        """Test the coalesced follow-up sees changes made during the first run"""
        store = GatedStore(fake_store)
        refresher = DashboardRefresher(store, colors)

        task = refresher.request_refresh()
        await asyncio.sleep(0)
        fake_store.records.append(make_record("r7", "2024-02-03", 150))
        refresher.request_refresh()
        store.gate.set()
        await task

        assert refresher.view.kpis.total_sales == Decimal("1000")

    async def test_close_cancels_in_flight_refresh(self, fake_store, colors):
        refresher = DashboardRefresher(GatedStore(fake_store), colors)
        refresher.request_refresh()
        await asyncio.sleep(0)

        await refresher.close()

        assert not refresher.is_refreshing
        assert refresher.refreshed_at is None


class TestLoadPerson:
    """Tests for the salesperson detail refetch"""

    async def test_load_person(self, fake_store, colors):
        refresher = DashboardRefresher(fake_store, colors)

        detail = await refresher.load_person("松澤")

        assert detail.summary.total_amount == Decimal("400")
        assert detail.achievement_rate == Decimal("50")
        assert detail.person.department == "営業1部"

    async def test_unknown_person_is_empty_detail(self, fake_store, colors):
        refresher = DashboardRefresher(fake_store, colors)

        detail = await refresher.load_person("誰か")

        assert detail.summary.deal_count == 0
        assert detail.person is None

    async def test_failure_returns_last_detail_for_same_person(self, fake_store, colors):
        refresher = DashboardRefresher(fake_store, colors)
        previous = await refresher.load_person("松澤")

        fake_store.fail_with = ConnectionError("db down")
        detail = await refresher.load_person("松澤")

        assert detail is previous

    async def test_failure_for_other_person_is_empty(self, fake_store, colors):
        refresher = DashboardRefresher(fake_store, colors)
        await refresher.load_person("松澤")

        fake_store.fail_with = ConnectionError("db down")
        detail = await refresher.load_person("坂口")

        assert detail.summary.name == "坂口"
        assert detail.summary.deal_count == 0
        assert detail.person is None


class TestWatchChanges:
    """Tests for the change notification loop"""

    async def test_refresh_on_subscribe_and_each_notification(self):
        refresher = SpyRefresher()
        subscription = FakeSubscription(notifications=3)

        task = asyncio.create_task(
            watch_changes(refresher, lambda: subscription, reconnect_delay=0)
        )
        await _wait_until(lambda: refresher.requests == 4)
        await _cancel(task)

        assert subscription.closed

    async def test_reconnects_after_subscription_failure(self):
        """Test a failed subscribe is retried and refreshes once connected"""
        refresher = SpyRefresher()
        subscriptions = [
            FakeSubscription(fail=KafkaConnectionError("broker unavailable")),
            FakeSubscription(),
        ]

        task = asyncio.create_task(
            watch_changes(refresher, lambda: subscriptions.pop(0), reconnect_delay=0)
        )
        await _wait_until(lambda: refresher.requests == 1 and not subscriptions)
        await _cancel(task)

        assert refresher.requests == 1

    async def test_resubscribes_when_stream_ends(self):
        refresher = SpyRefresher()
        opened = []

        def factory():
            subscription = FakeSubscription(notifications=1, endless=len(opened) > 0)
            opened.append(subscription)
            return subscription

        task = asyncio.create_task(watch_changes(refresher, factory, reconnect_delay=0))
        await _wait_until(lambda: len(opened) == 2 and refresher.requests == 4)
        await _cancel(task)

        assert opened[0].closed
        assert opened[1].closed

    async def test_unexpected_error_is_retried(self):
        """Test a non-Kafka failure does not stop the watcher"""
        refresher = SpyRefresher()
        subscriptions = [
            FakeSubscription(fail=RuntimeError("unexpected")),
            FakeSubscription(),
        ]

        task = asyncio.create_task(
            watch_changes(refresher, lambda: subscriptions.pop(0), reconnect_delay=0)
        )
        await _wait_until(lambda: refresher.requests == 1 and not subscriptions)

        assert not task.done()
        await _cancel(task)
