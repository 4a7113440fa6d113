"""
Queue strategies using Strategy Pattern.
Allows switching between different queue backends (Redis Streams, In-Memory).

The queue is the analytics side channel: publish failures are logged and
reported as False, never raised, so a broken sink cannot break a redirect.
"""

import logging
import socket
from abc import ABC, abstractmethod
from collections import deque
from typing import Dict, List

from .models import UsageEvent

logger = logging.getLogger(__name__)


class QueueStrategy(ABC):
    """
    Abstract base class for queue strategies.

    This is the Strategy Pattern interface - allows multiple queue implementations
    without changing the service/worker code.
    """

    @abstractmethod
    async def publish(self, queue_name: str, message: UsageEvent) -> bool:
        """
        Publish a message to the queue.

        Args:
            queue_name: Name of the queue
            message: UsageEvent to publish

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[UsageEvent]:
        """
        Consume messages from the queue.

        Args:
            queue_name: Name of the queue
            batch_size: Maximum number of messages to retrieve
            block_time: Time to wait for messages (milliseconds)

        Returns:
            List of UsageEvent messages
        """
        pass

    @abstractmethod
    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        """
        Acknowledge messages (mark as processed).

        Returns:
            True if successful
        """
        pass

    @abstractmethod
    async def get_queue_length(self, queue_name: str) -> int:
        """Get the number of pending messages in queue"""
        pass

    async def consume_batch(self, queue_name: str, batch_size: int = 100,
                            block_time: int = 1000) -> List[UsageEvent]:
        """Consume a batch of messages (consume with a larger default batch size)"""
        return await self.consume(queue_name, batch_size, block_time)


class RedisStreamQueue(QueueStrategy):
    """
    Redis Streams implementation for message queue.

    How it works:
    1. Producer publishes messages using XADD
    2. Consumer reads messages using XREADGROUP
    3. Consumer acknowledges messages using XACK
    4. Unacknowledged messages stay pending and can be reclaimed
    """

    def __init__(self, redis_client, consumer_group: str = "usage_workers"):
        """
        Args:
            redis_client: redis.asyncio.Redis client (decode_responses=True)
            consumer_group: Name of consumer group for workers
        """
        self.redis = redis_client
        self.consumer_group = consumer_group
        self.consumer_name = f"worker-{socket.gethostname()}-{id(self)}"
        self._initialized_streams = set()

    async def _ensure_stream_exists(self, queue_name: str):
        """Create the stream and consumer group if they don't exist"""
        if queue_name in self._initialized_streams:
            return

        try:
            await self.redis.xgroup_create(
                name=queue_name,
                groupname=self.consumer_group,
                id="0",
                mkstream=True
            )
            logger.info(f"✅ Created Redis stream: {queue_name}")
        except Exception as e:
            # Group might already exist, that's OK
            if "BUSYGROUP" not in str(e):
                logger.warning(f"⚠️  Stream creation warning: {e}")

        self._initialized_streams.add(queue_name)

    async def publish(self, queue_name: str, message: UsageEvent) -> bool:
        try:
            await self._ensure_stream_exists(queue_name)
            await self.redis.xadd(queue_name, {"data": message.model_dump_json()})
            return True
        except Exception as e:
            logger.error(f"❌ Redis publish error: {e}")
            return False

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[UsageEvent]:
        try:
            await self._ensure_stream_exists(queue_name)

            # '>' means "messages never delivered to other consumers"
            messages = await self.redis.xreadgroup(
                groupname=self.consumer_group,
                consumername=self.consumer_name,
                streams={queue_name: ">"},
                count=batch_size,
                block=block_time
            )
        except Exception as e:
            logger.error(f"❌ Redis consume error: {e}")
            return []

        events = []
        for _stream_name, stream_messages in messages or []:
            for message_id, message_data in stream_messages:
                try:
                    event = UsageEvent.model_validate_json(message_data["data"])
                    event.message_id = message_id
                    events.append(event)
                except Exception as e:
                    logger.warning(f"⚠️  Failed to parse message {message_id}: {e}")

        return events

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        if not message_ids:
            return True
        try:
            await self.redis.xack(queue_name, self.consumer_group, *message_ids)
            return True
        except Exception as e:
            logger.error(f"❌ Redis ack error: {e}")
            return False

    async def get_queue_length(self, queue_name: str) -> int:
        try:
            info = await self.redis.xinfo_stream(queue_name)
            return info["length"]
        except Exception:
            return 0


class InMemoryQueue(QueueStrategy):
    """
    In-memory queue implementation using Python deque.

    Not persistent and not shared between processes; used in
    development and tests. Each queue holds at most max_length events;
    once full, the oldest event is dropped to make room.
    """

    def __init__(self, max_length: int = 10000):
        self.max_length = max_length
        self.dropped_count = 0
        self._queues: Dict[str, deque] = {}

    def _get_queue(self, queue_name: str) -> deque:
        if queue_name not in self._queues:
            self._queues[queue_name] = deque(maxlen=self.max_length)
        return self._queues[queue_name]

    async def publish(self, queue_name: str, message: UsageEvent) -> bool:
        queue = self._get_queue(queue_name)
        if len(queue) == self.max_length:
            self.dropped_count += 1
            if self.dropped_count % 1000 == 1:
                logger.warning(
                    f"⚠️  Queue {queue_name} full ({self.max_length}), "
                    f"dropped {self.dropped_count} oldest events so far"
                )
        queue.append(message)
        return True

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[UsageEvent]:
        """block_time is ignored (no blocking in this simple implementation)"""
        queue = self._get_queue(queue_name)
        return [queue.popleft() for _ in range(min(batch_size, len(queue)))]

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        # Messages are removed on consume
        return True

    async def get_queue_length(self, queue_name: str) -> int:
        return len(self._get_queue(queue_name))
