"""One-time SMS verification codes in Redis.

Two keys per phone number:
- ``<service>:sms_guard:<phone>`` set with NX for the resend interval
- ``<service>:sms_code:<phone>`` holding the current code for its TTL

Writing a new code replaces the old one. Consuming compares and deletes in a
single Lua script so a code can only be used once.
"""

from abc import ABC, abstractmethod

from loguru import logger
from redis.asyncio import Redis

from qlive.shared.config import config
from qlive.shared.storage.redis import get_redis_client

# Atomically consume: only delete if value==code
_CONSUME_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class SMSCodeStore(ABC):
    @abstractmethod
    async def save_code(self, phone_number: str, code: str, *, ttl: int, resend_interval: int) -> bool:
        """Store a fresh code. Returns False while the resend interval is still running."""

    @abstractmethod
    async def consume_code(self, phone_number: str, code: str) -> bool:
        """Remove the code if it matches. Returns whether it matched."""

    @abstractmethod
    async def discard_code(self, phone_number: str, code: str) -> None:
        """Drop a code that was never delivered and release the resend interval."""


class RedisSMSCodeStore(SMSCodeStore):
    def __init__(self, redis_client: Redis | None = None, key_prefix: str | None = None):
        self._redis_client = redis_client
        self.key_prefix = key_prefix or config.get_service_code()

    @property
    def redis_client(self) -> Redis:
        if self._redis_client is None:
            self._redis_client = get_redis_client(config.get_redis_major_label())
        return self._redis_client

    def _code_key(self, phone_number: str) -> str:
        return f"{self.key_prefix}:sms_code:{phone_number}"

    def _guard_key(self, phone_number: str) -> str:
        return f"{self.key_prefix}:sms_guard:{phone_number}"

    async def _eval(self, script: str, keys: list[str], args: list) -> int:
        return await self.redis_client.eval(script, len(keys), *keys, *args)  # type: ignore[misc]

    async def save_code(self, phone_number: str, code: str, *, ttl: int, resend_interval: int) -> bool:
        acquired = await self.redis_client.set(self._guard_key(phone_number), "1", nx=True, ex=resend_interval)
        if not acquired:
            return False

        await self.redis_client.set(self._code_key(phone_number), code, ex=ttl)
        return True

    async def consume_code(self, phone_number: str, code: str) -> bool:
        res = await self._eval(_CONSUME_LUA, [self._code_key(phone_number)], [code])
        return res == 1

    async def discard_code(self, phone_number: str, code: str) -> None:
        await self._eval(_CONSUME_LUA, [self._code_key(phone_number)], [code])
        await self.redis_client.delete(self._guard_key(phone_number))
        logger.debug("Discarded undelivered code for {}", phone_number)
