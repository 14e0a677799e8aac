"""Tests for fixed-length identifier generation."""

import random

import pytest

from qlive.domain.utils.idgen import (
    ACCOUNT_ID_LENGTH,
    ALPHANUM,
    ROOM_ID_LENGTH,
    TOKEN_LENGTH,
    IDGenerator,
    new_account_id_generator,
    new_room_id_generator,
    new_token_generator,
)
from qlive.utils.app_errors import AppError, AppErrorCode


class ConstantRandom(random.Random):
    """Always picks the first symbol, so every ID is identical."""

    def choice(self, seq):
        return seq[0]


class TestNewId:
    @pytest.mark.parametrize(
        "factory, length",
        [
            (new_account_id_generator, ACCOUNT_ID_LENGTH),
            (new_room_id_generator, ROOM_ID_LENGTH),
            (new_token_generator, TOKEN_LENGTH),
        ],
    )
    def test_length_and_alphabet(self, factory, length):
        generator = factory()
        for _ in range(20):
            value = generator.new_id()
            assert len(value) == length
            assert set(value) <= set(ALPHANUM)

    def test_seeded_rng_is_deterministic(self):
        first = new_room_id_generator(random.Random(42))
        second = new_room_id_generator(random.Random(42))

        assert [first.new_id() for _ in range(3)] == [second.new_id() for _ in range(3)]

    def test_rejects_invalid_arguments(self):
        with pytest.raises(ValueError):
            IDGenerator(0)
        with pytest.raises(ValueError):
            IDGenerator(8, max_attempts=0)


class TestGenerateUnique:
    async def test_returns_first_inserted_record(self):
        generator = IDGenerator(8, rng=random.Random(1))
        seen: list[str] = []

        async def try_insert(candidate: str):
            seen.append(candidate)
            return {"id": candidate}

        record = await generator.generate_unique(try_insert)

        assert record == {"id": seen[0]}
        assert len(seen) == 1

    async def test_retries_after_conflict(self):
        generator = IDGenerator(8, rng=random.Random(7), max_attempts=3)
        attempts: list[str] = []

        async def try_insert(candidate: str):
            attempts.append(candidate)
            return None if len(attempts) < 3 else candidate

        assert await generator.generate_unique(try_insert) == attempts[-1]
        assert len(attempts) == 3

    async def test_exhaustion_raises_generation_exhausted(self):
        generator = IDGenerator(4, rng=ConstantRandom(), max_attempts=5)
        calls = 0

        async def try_insert(candidate: str):
            nonlocal calls
            calls += 1
            assert candidate == "0000"
            return None

        with pytest.raises(AppError) as exc_info:
            await generator.generate_unique(try_insert)

        assert exc_info.value.errcode == AppErrorCode.E_GENERATION_EXHAUSTED
        assert calls == 5

    async def test_errors_from_try_insert_propagate(self):
        generator = IDGenerator(4, rng=random.Random(3))

        async def try_insert(candidate: str):
            raise AppError(AppErrorCode.E_ROOM_NAME_USED)

        with pytest.raises(AppError) as exc_info:
            await generator.generate_unique(try_insert)

        assert exc_info.value.errcode == AppErrorCode.E_ROOM_NAME_USED


class TestCollisionLogging:
    async def test_token_candidate_is_not_logged(self, log_messages):
        generator = new_token_generator(rng=ConstantRandom(), max_attempts=2)

        async def always_conflict(candidate: str):
            return None

        with pytest.raises(AppError):
            await generator.generate_unique(always_conflict)

        candidate = ALPHANUM[0] * TOKEN_LENGTH
        assert sum("token collision" in m for m in log_messages) == 2
        assert not any(candidate in m for m in log_messages)
