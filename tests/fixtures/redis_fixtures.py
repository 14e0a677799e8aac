"""Redis fixtures for testing."""

import os
from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from redis.asyncio import Redis

REDIS_TEST_URL_ENV = "REDIS_URL_QLIVE_MAJOR"


@pytest.fixture(scope="session")
def redis_url() -> str:
    """
    Redis URL for store tests.

    Tests depending on it are skipped unless REDIS_URL_QLIVE_MAJOR is set.
    """
    url = os.environ.get(REDIS_TEST_URL_ENV)
    if not url:
        pytest.skip(f"{REDIS_TEST_URL_ENV} environment variable not set")
    return url


@pytest_asyncio.fixture(scope="function")
async def redis_client(redis_url: str) -> AsyncGenerator[Redis]:
    """Create Redis client for testing (function-scoped to avoid event loop issues)."""
    client: Redis = Redis.from_url(redis_url, decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def redis_key_prefix() -> str:
    """Unique key prefix so tests never share keys."""
    return f"qlive_test_{uuid4().hex[:8]}"
