"""
Usage Event Worker

Consumes usage events published by the redirect path and stores them in
analytics storage, in batches.

Architecture:
- Consumes messages from queue in batches
- Stores usage data via strategy pattern
- Acknowledges a batch only after it was stored
"""

import asyncio
import logging
import signal
import sys
from typing import Dict, List

from hashlink_app.config import settings
from hashlink_app.queue.models import UsageEvent
from hashlink_app.queue.strategies import QueueStrategy
from hashlink_app.storage.strategies import HitStorageStrategy

logger = logging.getLogger(__name__)


class UsageWorker:
    """
    Usage event worker with batch processing.

    Keeps a per-token tally of what it has processed since start,
    which is logged for visibility.
    """

    def __init__(
        self,
        queue: QueueStrategy,
        storage: HitStorageStrategy,
        queue_name: str = "usage_events",
        batch_size: int = 100,
        idle_interval: float = 5,
    ):
        """
        Args:
            queue: Queue strategy for consuming messages
            storage: Storage strategy for usage data
            queue_name: Queue to consume from
            batch_size: Maximum events per batch
            idle_interval: Seconds to wait after an empty batch or an error
        """
        self.queue = queue
        self.storage = storage
        self.queue_name = queue_name
        self.batch_size = batch_size
        self.idle_interval = idle_interval
        self.running = False
        self.usage_counts: Dict[str, int] = {}
        self.processed_count = 0

    async def start(self):
        """Run until stop() is called"""
        self.running = True
        logger.info(f"🚀 Usage worker started (batch size: {self.batch_size})")

        while self.running:
            try:
                if not await self.run_once():
                    await asyncio.sleep(self.idle_interval)
            except asyncio.CancelledError:
                logger.info("Worker task cancelled.")
                break
            except Exception as e:
                logger.error(f"❌ Error processing batch: {e}")
                await asyncio.sleep(self.idle_interval)

        logger.info("🛑 Usage worker stopped")

    async def run_once(self) -> int:
        """
        Consume and store one batch.

        Returns:
            Number of events processed (0 if the batch was left unacknowledged)
        """
        messages = await self.queue.consume_batch(
            queue_name=self.queue_name,
            batch_size=self.batch_size,
            block_time=1000
        )
        if not messages:
            return 0

        if not await self.storage.store_hits(messages):
            # Messages stay pending for retry
            logger.error(f"❌ Failed to store {len(messages)} usage events")
            return 0

        self._count(messages)

        message_ids = [msg.message_id for msg in messages if msg.message_id]
        if message_ids:
            await self.queue.ack(self.queue_name, message_ids)

        self.processed_count += len(messages)
        logger.info(f"✅ Processed {len(messages)} usage events. Total: {self.processed_count}")
        return len(messages)

    def _count(self, messages: List[UsageEvent]):
        for event in messages:
            self.usage_counts[event.token] = self.usage_counts.get(event.token, 0) + event.count

    def _signal_handler(self, signum, frame):
        logger.info(f"Received signal {signum}. Shutting down gracefully...")
        self.stop()

    def stop(self):
        """Stop the worker"""
        self.running = False


async def main():
    """
    Main entry point for the usage worker.

    Usage:
        python -m hashlink_app.hit_processor.hit_worker
    """
    from hashlink_app.logging_config import setup_logging
    from hashlink_app.queue.factory import QueueFactory, QueueBackend
    from hashlink_app.storage.strategies import SQLiteHitStorage

    setup_logging(settings.log_level)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Queue backend: {settings.queue_backend}")

    queue = QueueFactory.create(QueueBackend(settings.queue_backend))
    storage = SQLiteHitStorage(db_path=settings.hit_storage_sqlite_path)

    worker = UsageWorker(
        queue=queue,
        storage=storage,
        queue_name=settings.queue_name,
        batch_size=settings.queue_batch_size,
        idle_interval=settings.queue_worker_interval,
    )
    signal.signal(signal.SIGINT, worker._signal_handler)
    signal.signal(signal.SIGTERM, worker._signal_handler)

    try:
        await worker.start()
    except Exception as e:
        logger.error(f"❌ Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
