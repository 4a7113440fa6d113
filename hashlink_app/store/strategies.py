"""
Mapping store strategies using Strategy Pattern.
Allows switching between different key-value backends (Redis, SQL, In-Memory).

The store is the system of record: token -> original URL. Mappings are only
ever created, never updated or deleted, so every backend exposes an atomic
put-if-absent instead of a plain set.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hashlink_app.models.mapping import Mapping


class KeyPage(BaseModel):
    """One page of a key enumeration"""

    keys: List[str]
    cursor: Optional[str] = None  # None when enumeration is complete


class MappingStore(ABC):
    """
    Abstract base class for mapping stores.

    All methods are async because store operations involve I/O.
    Errors are not swallowed here: a failing store must fail the request.
    """

    @abstractmethod
    async def get(self, token: str) -> Optional[str]:
        """
        Get the URL stored under a token.

        Returns:
            The stored URL or None if the token is unknown
        """
        pass

    @abstractmethod
    async def put_if_absent(self, token: str, url: str) -> Optional[str]:
        """
        Store url under token unless the token is already taken.

        Returns:
            None if the mapping was written, otherwise the URL already stored
        """
        pass

    @abstractmethod
    async def list_keys(self, cursor: Optional[str] = None, limit: int = 1000) -> KeyPage:
        """
        Enumerate one page of tokens.

        Args:
            cursor: Continuation returned by the previous page (None to start)
            limit: Page size hint

        Returns:
            KeyPage with the tokens and the next cursor
        """
        pass

    async def iter_keys(self, page_size: int = 1000) -> AsyncIterator[str]:
        """Walk every page of list_keys and yield each token"""
        cursor = None
        while True:
            page = await self.list_keys(cursor=cursor, limit=page_size)
            for key in page.keys:
                yield key
            if page.cursor is None:
                break
            cursor = page.cursor


class RedisMappingStore(MappingStore):
    """
    Redis implementation of the mapping store.

    Keys are namespaced with a prefix so SCAN only walks mappings.
    SETNX gives atomic create; since values never change afterwards,
    a follow-up GET after a failed SETNX is consistent.
    """

    def __init__(self, redis_client, key_prefix: str = "link:"):
        """
        Args:
            redis_client: redis.asyncio.Redis client (decode_responses=True)
            key_prefix: Namespace for mapping keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    async def get(self, token: str) -> Optional[str]:
        return await self.redis.get(self._key(token))

    async def put_if_absent(self, token: str, url: str) -> Optional[str]:
        created = await self.redis.setnx(self._key(token), url)
        if created:
            return None
        return await self.redis.get(self._key(token))

    async def list_keys(self, cursor: Optional[str] = None, limit: int = 1000) -> KeyPage:
        # SCAN may return a key more than once; callers get store order as-is
        next_cursor, keys = await self.redis.scan(
            cursor=int(cursor or 0),
            match=f"{self.key_prefix}*",
            count=limit,
        )
        prefix_len = len(self.key_prefix)
        return KeyPage(
            keys=[key[prefix_len:] for key in keys],
            cursor=str(next_cursor) if int(next_cursor) != 0 else None,
        )


class SQLMappingStore(MappingStore):
    """
    SQLAlchemy implementation of the mapping store.

    The token is the primary key, so a concurrent insert of the same token
    raises IntegrityError; the loser rolls back and reads the winner's value.
    Listing uses keyset pagination on the token column.

    Note: Async for interface consistency, queries are sync (fast).
    """

    def __init__(self, session_factory):
        """
        Args:
            session_factory: Callable returning a new SQLAlchemy Session
        """
        self.session_factory = session_factory

    async def get(self, token: str) -> Optional[str]:
        db: Session = self.session_factory()
        try:
            mapping = db.get(Mapping, token)
            return mapping.url if mapping else None
        finally:
            db.close()

    async def put_if_absent(self, token: str, url: str) -> Optional[str]:
        db: Session = self.session_factory()
        try:
            db.add(Mapping(token=token, url=url))
            db.commit()
            return None
        except IntegrityError:
            db.rollback()
            existing = db.get(Mapping, token)
            return existing.url if existing else None
        finally:
            db.close()

    async def list_keys(self, cursor: Optional[str] = None, limit: int = 1000) -> KeyPage:
        db: Session = self.session_factory()
        try:
            query = select(Mapping.token).order_by(Mapping.token).limit(limit)
            if cursor is not None:
                query = query.where(Mapping.token > cursor)
            keys = list(db.scalars(query))
        finally:
            db.close()

        return KeyPage(
            keys=keys,
            cursor=keys[-1] if len(keys) == limit else None,
        )


class InMemoryMappingStore(MappingStore):
    """
    In-memory mapping store using Python dict.

    Pros:
    - Very fast (no network overhead)
    - Simple (no external dependencies)
    - Good for development and testing

    Cons:
    - Not distributed (each process has its own mappings)
    - Lost on restart

    The membership check and insert run without an await between them,
    so put_if_absent is atomic on the event loop.
    """

    def __init__(self):
        self._mappings: Dict[str, str] = {}
        self.write_count = 0

    async def get(self, token: str) -> Optional[str]:
        return self._mappings.get(token)

    async def put_if_absent(self, token: str, url: str) -> Optional[str]:
        if token in self._mappings:
            return self._mappings[token]
        self._mappings[token] = url
        self.write_count += 1
        return None

    async def list_keys(self, cursor: Optional[str] = None, limit: int = 1000) -> KeyPage:
        start = int(cursor or 0)
        keys = list(self._mappings)[start:start + limit]
        end = start + len(keys)
        return KeyPage(
            keys=keys,
            cursor=str(end) if end < len(self._mappings) else None,
        )
