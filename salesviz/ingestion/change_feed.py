"""
Record Change Notifications

The data store announces every insert/update/delete on sales_records with a
payload-free message on a Kafka topic. Consumers learn *that* something
changed, never *what*; they must refetch.

- ChangeSubscription: owned, async-context-managed handle on the topic
- publish_change: announce a change after writing to the store
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Optional

import structlog
from aiokafka import AIOKafkaConsumer, AIOKafkaProducer
from prometheus_client import Counter, Gauge

from salesviz.config import get_settings

logger = structlog.get_logger(__name__)


# =============================================================================
# METRICS
# =============================================================================

CHANGES_RECEIVED = Counter(
    "salesviz_change_notifications_total",
    "Record change notifications received",
    ["topic"],
)

ACTIVE_SUBSCRIPTIONS = Gauge(
    "salesviz_change_subscriptions_active",
    "Open change notification subscriptions",
)


@dataclass(frozen=True)
class ChangeNotification:
    """Signal that the record table changed"""
    topic: str
    received_at: datetime


class ChangeSubscription:
    """
    Subscription to record change notifications.

    The consumer is started on enter and always stopped on exit, including
    on errors and task cancellation. Every subscription reads without a
    consumer group so each dashboard process sees every notification.

    Example:
        async with ChangeSubscription() as subscription:
            async for notification in subscription:
                refresher.request_refresh()
    """

    def __init__(
        self,
        topic: Optional[str] = None,
        consumer_factory: Optional[Callable[[str], AIOKafkaConsumer]] = None,
    ):
        self.topic = topic or get_settings().kafka.topics_changes
        self._consumer_factory = consumer_factory or self._create_consumer
        self._consumer: Optional[AIOKafkaConsumer] = None

    @staticmethod
    def _create_consumer(topic: str) -> AIOKafkaConsumer:
        kafka = get_settings().kafka
        return AIOKafkaConsumer(
            topic,
            bootstrap_servers=kafka.bootstrap_servers,
            group_id=None,
            auto_offset_reset=kafka.auto_offset_reset,
        )

    @property
    def is_active(self) -> bool:
        return self._consumer is not None

    async def __aenter__(self) -> "ChangeSubscription":
        consumer = self._consumer_factory(self.topic)
        try:
            await consumer.start()
        except Exception:
            await consumer.stop()
            raise

        self._consumer = consumer
        ACTIVE_SUBSCRIPTIONS.inc()
        logger.info("Subscribed to record changes", topic=self.topic)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop the consumer; safe to call more than once"""
        if self._consumer is None:
            return

        consumer, self._consumer = self._consumer, None
        try:
            await consumer.stop()
        finally:
            ACTIVE_SUBSCRIPTIONS.dec()
            logger.info("Unsubscribed from record changes", topic=self.topic)

    def __aiter__(self) -> AsyncIterator[ChangeNotification]:
        return self._notifications()

    async def _notifications(self) -> AsyncIterator[ChangeNotification]:
        if self._consumer is None:
            raise RuntimeError("Subscription is not active. Use 'async with'.")

        async for message in self._consumer:
            CHANGES_RECEIVED.labels(topic=message.topic).inc()
            logger.debug("Record change received", topic=message.topic, offset=message.offset)
            yield ChangeNotification(
                topic=message.topic,
                received_at=datetime.now(timezone.utc),
            )


async def publish_change(topic: Optional[str] = None) -> None:
    """Announce that sales_records changed"""
    kafka = get_settings().kafka
    topic = topic or kafka.topics_changes

    producer = AIOKafkaProducer(bootstrap_servers=kafka.bootstrap_servers)
    await producer.start()
    try:
        await producer.send_and_wait(topic, b"")
        logger.info("Published record change", topic=topic)
    finally:
        await producer.stop()
