"""
Tests for the Redis-backed store, rate limiter and queue.

MockRedis implements just the commands these backends send, with the
same call shapes as redis.asyncio (decode_responses=True).
"""
import asyncio
from fnmatch import fnmatch

from hashlink_app.queue.models import UsageEvent
from hashlink_app.queue.strategies import RedisStreamQueue
from hashlink_app.ratelimit.strategies import RedisRateLimiter
from hashlink_app.store.strategies import RedisMappingStore


class MockPipeline:
    def __init__(self, redis):
        self.redis = redis
        self.commands = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def incr(self, key):
        self.commands.append(("incr", key))

    def expire(self, key, seconds):
        self.commands.append(("expire", key, seconds))

    async def execute(self):
        results = []
        for command in self.commands:
            if command[0] == "incr":
                value = int(self.redis.data.get(command[1], 0)) + 1
                self.redis.data[command[1]] = str(value)
                results.append(value)
            else:
                self.redis.expirations[command[1]] = command[2]
                results.append(True)
        self.commands = []
        return results


class MockRedis:
    def __init__(self):
        self.data = {}
        self.expirations = {}
        self.streams = {}
        self.groups = set()
        self.pending = {}
        self.delivered = {}

    async def get(self, key):
        return self.data.get(key)

    async def setnx(self, key, value):
        if key in self.data:
            return False
        self.data[key] = value
        return True

    async def scan(self, cursor=0, match=None, count=None):
        keys = sorted(key for key in self.data if match is None or fnmatch(key, match))
        page = keys[cursor:cursor + count]
        next_cursor = cursor + count if cursor + count < len(keys) else 0
        return next_cursor, page

    def pipeline(self, transaction=True):
        return MockPipeline(self)

    async def xgroup_create(self, name, groupname, id="0", mkstream=False):
        if (name, groupname) in self.groups:
            raise Exception("BUSYGROUP Consumer Group name already exists")
        self.groups.add((name, groupname))
        self.streams.setdefault(name, [])

    async def xadd(self, name, fields):
        stream = self.streams.setdefault(name, [])
        message_id = f"{len(stream) + 1}-0"
        stream.append((message_id, fields))
        return message_id

    async def xreadgroup(self, groupname, consumername, streams, count=None, block=None):
        result = []
        for name in streams:
            offset = self.delivered.get((name, groupname), 0)
            messages = self.streams.get(name, [])[offset:offset + count]
            self.delivered[(name, groupname)] = offset + len(messages)
            for message_id, _ in messages:
                self.pending.setdefault((name, groupname), set()).add(message_id)
            if messages:
                result.append([name, messages])
        return result

    async def xack(self, name, groupname, *message_ids):
        pending = self.pending.get((name, groupname), set())
        acked = [message_id for message_id in message_ids if message_id in pending]
        pending.difference_update(acked)
        return len(acked)

    async def xinfo_stream(self, name):
        if name not in self.streams:
            raise Exception("ERR no such key")
        return {"length": len(self.streams[name])}


class TestRedisMappingStore:
    """Test the SETNX/SCAN backed store"""

    def test_put_if_absent(self):
        redis = MockRedis()
        store = RedisMappingStore(redis, key_prefix="link:")

        assert asyncio.run(store.put_if_absent("abcd1234", "https://a.example.com")) is None
        assert asyncio.run(store.put_if_absent("abcd1234", "https://b.example.com")) == "https://a.example.com"
        assert asyncio.run(store.get("abcd1234")) == "https://a.example.com"
        assert redis.data == {"link:abcd1234": "https://a.example.com"}

    def test_scan_walks_every_page(self):
        redis = MockRedis()
        store = RedisMappingStore(redis, key_prefix="link:")
        redis.data["ratelimit:abcd:1"] = "3"
        tokens = [f"{i:08x}" for i in range(7)]
        for token in tokens:
            asyncio.run(store.put_if_absent(token, f"https://example.com/{token}"))

        first = asyncio.run(store.list_keys(limit=3))
        assert first.keys == tokens[:3]
        assert first.cursor == "3"

        async def collect():
            return [key async for key in store.iter_keys(page_size=3)]

        assert asyncio.run(collect()) == tokens


class TestRedisRateLimiter:
    """Test the fixed-window counter"""

    def test_fixed_window(self):
        now = [1000.0]
        redis = MockRedis()
        limiter = RedisRateLimiter(redis, max_requests=2, window_seconds=60, clock=lambda: now[0])

        assert asyncio.run(limiter.limit("abcd")) is True
        assert asyncio.run(limiter.limit("abcd")) is True
        assert asyncio.run(limiter.limit("abcd")) is False
        assert asyncio.run(limiter.get_remaining("abcd")) == 0
        assert redis.expirations == {"ratelimit:abcd:16": 60}

        now[0] += 60
        assert asyncio.run(limiter.get_remaining("abcd")) == 2
        assert asyncio.run(limiter.limit("abcd")) is True


class TestRedisStreamQueue:
    """Test XADD / XREADGROUP / XACK flow"""

    def test_publish_consume_ack(self):
        redis = MockRedis()
        queue = RedisStreamQueue(redis, consumer_group="usage_workers")

        assert asyncio.run(queue.publish("usage_events", UsageEvent(token="abcd1234", url="https://a.example.com")))
        assert asyncio.run(queue.publish("usage_events", UsageEvent(token="ffff0000", url="https://b.example.com")))
        assert asyncio.run(queue.get_queue_length("usage_events")) == 2

        events = asyncio.run(queue.consume("usage_events", batch_size=10))
        assert [event.token for event in events] == ["abcd1234", "ffff0000"]
        assert [event.message_id for event in events] == ["1-0", "2-0"]
        assert redis.pending[("usage_events", "usage_workers")] == {"1-0", "2-0"}

        assert asyncio.run(queue.ack("usage_events", [event.message_id for event in events]))
        assert redis.pending[("usage_events", "usage_workers")] == set()
        assert asyncio.run(queue.consume("usage_events", batch_size=10)) == []

    def test_existing_group_is_reused(self):
        redis = MockRedis()
        redis.groups.add(("usage_events", "usage_workers"))
        queue = RedisStreamQueue(redis, consumer_group="usage_workers")

        assert asyncio.run(queue.publish("usage_events", UsageEvent(token="abcd1234", url="https://a.example.com")))
        assert asyncio.run(queue.get_queue_length("usage_events")) == 1

    def test_missing_stream_has_zero_length(self):
        queue = RedisStreamQueue(MockRedis())
        assert asyncio.run(queue.get_queue_length("usage_events")) == 0
