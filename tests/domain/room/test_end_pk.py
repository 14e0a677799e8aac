"""Tests for RoomService.end_pk."""

import pytest

from qlive.domain.room._base import BaseService
from qlive.domain.room.room_domain import RoomService
from qlive.schemas import RoomStatus
from qlive.utils.app_errors import AppError, AppErrorCode


@pytest.fixture
async def paired(room_service: RoomService):
    alice = await room_service.create_room("alice", "alice_stream")
    bob = await room_service.create_room("bob", "bob_stream")
    await room_service.request_pk(alice.room_id, bob.room_id)
    return alice, bob


class TestEndPK:
    async def test_both_rooms_back_to_single(self, room_service, room_store, paired):
        alice, bob = paired

        room = await room_service.end_pk("bob", bob.room_id)

        assert room.status == RoomStatus.SINGLE
        assert room.pk_partner is None
        assert room_store.rooms[alice.room_id].status == RoomStatus.SINGLE
        assert room_store.rooms[alice.room_id].pk_partner is None

    async def test_rooms_can_pair_again(self, room_service, paired):
        alice, bob = paired
        await room_service.end_pk("alice", alice.room_id)

        result = await room_service.request_pk(bob.room_id, alice.room_id)

        assert result.room.pk_partner == alice.room_id

    async def test_single_room_is_not_in_pk(self, room_service):
        room = await room_service.create_room("alice", "alice_stream")

        with pytest.raises(AppError) as exc_info:
            await room_service.end_pk("alice", room.room_id)

        assert exc_info.value.errcode == AppErrorCode.E_ROOM_NOT_IN_PK

    async def test_non_creator(self, room_service, room_store, paired):
        alice, _ = paired

        with pytest.raises(AppError) as exc_info:
            await room_service.end_pk("bob", alice.room_id)

        assert exc_info.value.errcode == AppErrorCode.E_NO_PERMISSION
        assert room_store.rooms[alice.room_id].status == RoomStatus.PK_CONNECTED

    async def test_closed_room(self, room_service, paired):
        alice, _ = paired
        await room_service.close_room("alice", alice.room_id)

        with pytest.raises(AppError) as exc_info:
            await room_service.end_pk("alice", alice.room_id)

        assert exc_info.value.errcode == AppErrorCode.E_ROOM_NO_EXIST


class TestEnsureInPK:
    async def test_guard(self, room_store, paired):
        alice, _ = paired

        BaseService.ensure_in_pk(room_store.rooms[alice.room_id])

        single = room_store.rooms[alice.room_id].model_copy(update={"status": RoomStatus.SINGLE})
        with pytest.raises(AppError) as exc_info:
            BaseService.ensure_in_pk(single)
        assert exc_info.value.errcode == AppErrorCode.E_ROOM_NOT_IN_PK
