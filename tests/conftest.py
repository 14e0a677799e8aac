import warnings

import pytest
from loguru import logger

from qlive.app_config import AppEnvironConfig

warnings.filterwarnings("ignore", category=DeprecationWarning, module="beanie.*")

from tests.fixtures.memory_stores import (  # noqa: E402
    FakeClock,
    FakeSMSGateway,
    MemoryAccountStore,
    MemoryActiveSessionStore,
    MemoryRoomStore,
    MemorySMSCodeStore,
)

# Import database fixtures so they are available to all tests
from tests.fixtures.mongo_fixtures import *  # noqa: E402, F403
from tests.fixtures.redis_fixtures import *  # noqa: E402, F403


@pytest.fixture
def app_config() -> AppEnvironConfig:
    return AppEnvironConfig(
        DEMO_MODE=True,
        LIVE_HOST="live.test.example.com",
        LIVE_HUB="qlive-test",
        MAX_ROOMS=10,
        SESSION_TTL_SECONDS=3600,
        SMS_CODE_TTL_SECONDS=300,
        SMS_RESEND_INTERVAL_SECONDS=60,
        ID_MAX_ATTEMPTS=5,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def room_store(clock: FakeClock) -> MemoryRoomStore:
    return MemoryRoomStore(clock)


@pytest.fixture
def account_store() -> MemoryAccountStore:
    return MemoryAccountStore()


@pytest.fixture
def session_store() -> MemoryActiveSessionStore:
    return MemoryActiveSessionStore()


@pytest.fixture
def sms_code_store(clock: FakeClock) -> MemorySMSCodeStore:
    return MemorySMSCodeStore(clock)


@pytest.fixture
def sms_gateway() -> FakeSMSGateway:
    return FakeSMSGateway()


@pytest.fixture
def log_messages():
    """Messages logged through loguru while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
