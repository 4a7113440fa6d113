import asyncio
import logging
from typing import AsyncIterator, Optional, Set

from hashlink_app.config import ShortenerConfig
from hashlink_app.exceptions import CollisionError, NotFoundError, RateLimitedError, ValidationError
from hashlink_app.queue.models import UsageEvent
from hashlink_app.queue.strategies import QueueStrategy
from hashlink_app.ratelimit.strategies import RateLimiterStrategy
from hashlink_app.schemas.url import MappingEntry
from hashlink_app.services.token_strategies import DualDigestTokenStrategy, TokenStrategy
from hashlink_app.store.strategies import MappingStore

logger = logging.getLogger(__name__)


class URLService:
    """
    URL Service with dependency injection for store, rate limiter and queue.

    Stateless between calls: every mapping lives in the store. The only
    thing held here is the set of usage events still being published.
    """

    def __init__(
        self,
        store: MappingStore,
        rate_limiter: Optional[RateLimiterStrategy] = None,
        queue: Optional[QueueStrategy] = None,
        config: Optional[ShortenerConfig] = None,
        token_strategy: Optional[TokenStrategy] = None,
        queue_name: str = "usage_events",
        list_page_size: int = 1000,
    ):
        """
        Initialize URL service with dependencies.

        Args:
            store: Mapping store (system of record)
            rate_limiter: Gate consulted before every lookup (optional)
            queue: Sink for usage events (optional)
            config: Slice length and short URL host settings
            token_strategy: Overrides the dual-digest strategy built from config
            queue_name: Queue usage events are published to
            list_page_size: Page size used when enumerating the store
        """
        self.store = store
        self.rate_limiter = rate_limiter
        self.queue = queue
        self.config = config or ShortenerConfig()
        self.token_strategy = token_strategy or DualDigestTokenStrategy(self.config.slice_len)
        self.queue_name = queue_name
        self.list_page_size = list_page_size
        self._pending_events: Set[asyncio.Task] = set()

    def short_url_base(self, hostname: Optional[str]) -> str:
        """Fixed local host in development, the request's host otherwise"""
        if self.config.is_development:
            return self.config.dev_base_url
        return f"https://{hostname}"

    def short_url(self, token: str, hostname: Optional[str]) -> str:
        return f"{self.short_url_base(hostname)}/s/{token}"

    async def create_mapping(self, url: Optional[str]) -> str:
        """
        Derive the token for url and store the mapping.

        Process:
        1. Derive token from the URL bytes
        2. Read the store; an equal URL means already shortened (no write)
        3. Otherwise put-if-absent; losing a concurrent race is handled
           exactly like finding the value in step 2
        4. A different URL under the same token is a collision: refuse

        Returns:
            The token
        """
        if not url:
            raise ValidationError("No URL Provided")

        token = self.token_strategy.generate(url)

        existing = await self.store.get(token)
        if existing is None:
            existing = await self.store.put_if_absent(token, url)
            if existing is None:
                logger.info(f"Created mapping {token} -> {url}")
                return token

        if existing != url:
            logger.error(
                f"A collision has occurred! These URLs produce the same hash: {existing} & {url}"
            )
            raise CollisionError(token, existing, url)

        return token

    async def resolve(self, token: Optional[str]) -> str:
        """
        Look up the URL for a token.

        The rate limiter is consulted before the store, so a throttled
        token never reaches the store even if it is mapped. A usage event
        is published in the background; the caller does not wait for it.
        """
        if not token:
            raise ValidationError("No Token Provided")

        if self.rate_limiter and not await self.rate_limiter.limit(token):
            raise RateLimitedError()

        url = await self.store.get(token)
        if url is None:
            raise NotFoundError()

        self._emit_usage(UsageEvent(token=token, url=url, count=1))
        return url

    async def list_all(self) -> AsyncIterator[MappingEntry]:
        """
        Yield every stored mapping in store order.

        Each call starts a fresh enumeration. Values are re-read per key
        because enumeration only returns keys.
        """
        async for token in self.store.iter_keys(page_size=self.list_page_size):
            url = await self.store.get(token)
            if url is None:
                continue
            yield MappingEntry(token=token, url=url)

    def _emit_usage(self, event: UsageEvent):
        if self.queue is None:
            return
        task = asyncio.create_task(self._publish_usage(event))
        self._pending_events.add(task)
        task.add_done_callback(self._pending_events.discard)

    async def _publish_usage(self, event: UsageEvent):
        try:
            published = await self.queue.publish(self.queue_name, event)
        except Exception as e:
            logger.warning(f"⚠️  Usage event for {event.token} dropped: {e}")
            return
        if not published:
            logger.warning(f"⚠️  Usage event for {event.token} was not accepted by the queue")

    async def flush_usage_events(self):
        """Wait for usage events still being published (shutdown and tests)"""
        if self._pending_events:
            await asyncio.gather(*self._pending_events, return_exceptions=True)
