import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from qlive.utils.app_errors import AppError, AppErrorCode

ALPHANUM = "0123456789abcdefghijklmnopqrstuvwxyz"

ACCOUNT_ID_LENGTH = 12
ROOM_ID_LENGTH = 16
TOKEN_LENGTH = 32

DEFAULT_MAX_ATTEMPTS = 5

T = TypeVar("T")


class IDGenerator:
    """Fixed-length random identifiers with bounded retry on insert conflicts.

    The generator never checks storage for duplicates. Callers hand it a
    ``try_insert`` coroutine that attempts the guarded insert and returns the
    stored record, or ``None`` when the storage reported an ID conflict.
    """

    def __init__(
        self,
        length: int,
        *,
        rng: random.Random | None = None,
        alphabet: str = ALPHANUM,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        label: str = "id",
    ):
        if length <= 0:
            raise ValueError(f"length must be > 0 (got {length})")
        if max_attempts <= 0:
            raise ValueError(f"max_attempts must be > 0 (got {max_attempts})")

        self.length = length
        self.alphabet = alphabet
        self.max_attempts = max_attempts
        self.label = label
        self._rng = rng or random.SystemRandom()

    def new_id(self) -> str:
        return "".join(self._rng.choice(self.alphabet) for _ in range(self.length))

    async def generate_unique(self, try_insert: Callable[[str], Awaitable[T | None]]) -> T:
        """Generate IDs until ``try_insert`` succeeds or attempts run out.

        Raises:
            AppError: E_GENERATION_EXHAUSTED after ``max_attempts`` conflicts.
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.new_id()
            record = await try_insert(candidate)
            if record is not None:
                return record

            # Never log the candidate, tokens are credentials
            logger.warning("{} collision (attempt {}/{})", self.label, attempt, self.max_attempts)

        raise AppError(
            AppErrorCode.E_GENERATION_EXHAUSTED,
            f"Failed to generate a unique {self.label} after {self.max_attempts} attempts",
        )


def new_account_id_generator(rng: random.Random | None = None, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> IDGenerator:
    return IDGenerator(ACCOUNT_ID_LENGTH, rng=rng, max_attempts=max_attempts, label="account_id")


def new_room_id_generator(rng: random.Random | None = None, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> IDGenerator:
    return IDGenerator(ROOM_ID_LENGTH, rng=rng, max_attempts=max_attempts, label="room_id")


def new_token_generator(rng: random.Random | None = None, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> IDGenerator:
    return IDGenerator(TOKEN_LENGTH, rng=rng, max_attempts=max_attempts, label="token")
