"""
Test configuration and fixtures for the hash link shortener.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient

from main import app
from hashlink_app.config import ShortenerConfig
from hashlink_app.dependencies import get_url_service
from hashlink_app.queue.strategies import InMemoryQueue
from hashlink_app.ratelimit.strategies import InMemoryRateLimiter
from hashlink_app.services.token_strategies import TokenStrategy
from hashlink_app.services.url_service import URLService
from hashlink_app.store.strategies import InMemoryMappingStore


class FixedTokenStrategy(TokenStrategy):
    """Maps every URL to the same token, to force collisions"""

    def __init__(self, token: str = "deadbeef"):
        self.token = token

    def generate(self, url: str) -> str:
        return self.token


@pytest.fixture
def store():
    return InMemoryMappingStore()


@pytest.fixture
def rate_limiter():
    return InMemoryRateLimiter(max_requests=100, window_seconds=60)


@pytest.fixture
def queue():
    return InMemoryQueue()


@pytest.fixture
def config():
    return ShortenerConfig(slice_len=4, environment="development")


@pytest.fixture
def collision_service(store):
    """Service whose token strategy maps every URL to the same token"""
    return URLService(store=store, token_strategy=FixedTokenStrategy("deadbeef"))


@pytest.fixture
def url_service(store, rate_limiter, queue, config):
    return URLService(store=store, rate_limiter=rate_limiter, queue=queue, config=config)


def _client_for(service: URLService, **client_kwargs):
    app.dependency_overrides[get_url_service] = lambda: service
    return TestClient(app, **client_kwargs)


@pytest.fixture
def client(url_service):
    """
    Test client with the service dependency overridden.
    This is the main fixture that API tests will use.
    """
    with _client_for(url_service) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def client_factory():
    """Build a client around a custom service (collisions, failing stores)"""
    clients = []

    def make(service: URLService, **client_kwargs) -> TestClient:
        test_client = _client_for(service, **client_kwargs)
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield make

    for test_client in clients:
        test_client.__exit__(None, None, None)
    app.dependency_overrides.clear()
