"""Room persistence.

Every invariant that spans concurrent requests is enforced here by a single
conditional write: the unique indexes on ``room_id`` and on ``name`` among
open rooms, ``transition`` which only updates a room still in one of the
expected statuses, and ``close`` which closes a room together with its PK
partner in one transaction.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from beanie import UpdateResponse
from beanie.operators import In, NE, Set
from loguru import logger
from pymongo.errors import DuplicateKeyError

from qlive.schemas import LiveRoom, RoomStatus
from qlive.shared.utils import utc_now

from .room_models import RoomResponse


class RoomStore(ABC):
    """Storage interface used by the room service."""

    @abstractmethod
    async def get(self, room_id: str) -> RoomResponse | None: ...

    @abstractmethod
    async def find_open_by_name(self, name: str) -> RoomResponse | None: ...

    @abstractmethod
    async def insert(self, room: RoomResponse) -> bool:
        """Insert a new room. Returns False when a unique index rejected it."""

    @abstractmethod
    async def count_open(self) -> int: ...

    @abstractmethod
    async def list_open(self) -> list[RoomResponse]: ...

    @abstractmethod
    async def list_pk_candidates(self, exclude_creator: str) -> list[RoomResponse]: ...

    @abstractmethod
    async def transition(
        self,
        room_id: str,
        *,
        from_states: Iterable[RoomStatus],
        to_state: RoomStatus,
        pk_partner: str | None = None,
        expect_partner: str | None = None,
        creator: str | None = None,
        closed_at: datetime | None = None,
    ) -> RoomResponse | None:
        """Atomically move a room to ``to_state``.

        The update applies only if the room is currently in ``from_states``
        and, when given, has ``expect_partner`` as partner and ``creator`` as
        creator. ``pk_partner`` is written as-is (None clears it).

        Returns:
            The room as it was before the update, or None if nothing matched.
        """

    @abstractmethod
    async def close(
        self,
        room_id: str,
        *,
        from_states: Iterable[RoomStatus],
        creator: str,
        closed_at: datetime,
    ) -> RoomResponse | None:
        """Close a room of ``creator`` and free its PK partner atomically.

        A partner is reverted to single only while it still points back at
        ``room_id``. Readers never see the partner paired with a closed room.

        Returns:
            The room as it was before closing, or None if nothing matched.
        """


def _to_response(room: LiveRoom) -> RoomResponse:
    return RoomResponse(**room.model_dump(exclude={"id", "is_open"}))


class MongoRoomStore(RoomStore):
    """Room store backed by the ``rooms`` collection."""

    async def get(self, room_id: str) -> RoomResponse | None:
        room = await LiveRoom.find_one(LiveRoom.room_id == room_id)
        return _to_response(room) if room else None

    async def find_open_by_name(self, name: str) -> RoomResponse | None:
        room = await LiveRoom.find_one(LiveRoom.name == name, LiveRoom.is_open == True)  # noqa: E712
        return _to_response(room) if room else None

    async def insert(self, room: RoomResponse) -> bool:
        try:
            await LiveRoom(**room.model_dump(), is_open=room.is_open).insert()
        except DuplicateKeyError as e:
            logger.debug("Room insert rejected for {} ({}): {}", room.room_id, room.name, e)
            return False
        return True

    async def count_open(self) -> int:
        return await LiveRoom.find(LiveRoom.is_open == True).count()  # noqa: E712

    async def list_open(self) -> list[RoomResponse]:
        rooms = await LiveRoom.find(
            LiveRoom.is_open == True  # noqa: E712
        ).sort(-LiveRoom.created_at).to_list()
        return [_to_response(room) for room in rooms]

    async def list_pk_candidates(self, exclude_creator: str) -> list[RoomResponse]:
        rooms = await LiveRoom.find(
            LiveRoom.status == RoomStatus.SINGLE,
            NE(LiveRoom.creator, exclude_creator),
        ).sort(-LiveRoom.created_at).to_list()
        return [_to_response(room) for room in rooms]

    async def transition(
        self,
        room_id: str,
        *,
        from_states: Iterable[RoomStatus],
        to_state: RoomStatus,
        pk_partner: str | None = None,
        expect_partner: str | None = None,
        creator: str | None = None,
        closed_at: datetime | None = None,
    ) -> RoomResponse | None:
        conditions = [
            LiveRoom.room_id == room_id,
            In(LiveRoom.status, list(from_states)),
        ]
        if expect_partner is not None:
            conditions.append(LiveRoom.pk_partner == expect_partner)
        if creator is not None:
            conditions.append(LiveRoom.creator == creator)

        update_fields = {
            LiveRoom.status: to_state,
            LiveRoom.is_open: to_state != RoomStatus.CLOSED,
            LiveRoom.pk_partner: pk_partner,
            LiveRoom.updated_at: utc_now(),
        }
        if closed_at is not None:
            update_fields[LiveRoom.closed_at] = closed_at

        previous = await LiveRoom.find_one(*conditions).update(
            Set(update_fields),  # type: ignore[arg-type]
            response_type=UpdateResponse.OLD_DOCUMENT,
        )
        return _to_response(previous) if previous else None

    async def close(
        self,
        room_id: str,
        *,
        from_states: Iterable[RoomStatus],
        creator: str,
        closed_at: datetime,
    ) -> RoomResponse | None:
        # Needs a replica set: both writes commit together or not at all
        client = LiveRoom.get_motor_collection().database.client
        async with await client.start_session() as session:
            async with session.start_transaction():
                previous = await LiveRoom.find_one(
                    LiveRoom.room_id == room_id,
                    In(LiveRoom.status, list(from_states)),
                    LiveRoom.creator == creator,
                    session=session,
                ).update(
                    Set({
                        LiveRoom.status: RoomStatus.CLOSED,
                        LiveRoom.is_open: False,
                        LiveRoom.pk_partner: None,
                        LiveRoom.updated_at: utc_now(),
                        LiveRoom.closed_at: closed_at,
                    }),  # type: ignore[arg-type]
                    response_type=UpdateResponse.OLD_DOCUMENT,
                    session=session,
                )
                if previous is None:
                    return None

                if previous.status == RoomStatus.PK_CONNECTED and previous.pk_partner:
                    partner = await LiveRoom.find_one(
                        LiveRoom.room_id == previous.pk_partner,
                        LiveRoom.status == RoomStatus.PK_CONNECTED,
                        LiveRoom.pk_partner == room_id,
                        session=session,
                    ).update(
                        Set({
                            LiveRoom.status: RoomStatus.SINGLE,
                            LiveRoom.pk_partner: None,
                            LiveRoom.updated_at: utc_now(),
                        }),  # type: ignore[arg-type]
                        response_type=UpdateResponse.OLD_DOCUMENT,
                        session=session,
                    )
                    if partner is None:
                        logger.warning(f"Room {previous.pk_partner} was not paired with {room_id}, nothing to revert")

        return _to_response(previous)
