"""Room lifecycle operations."""

from loguru import logger

from qlive.schemas import RoomStatus
from qlive.utils.app_errors import AppError, AppErrorCode

from ._base import BaseService
from .room_models import RoomListResponse, RoomResponse
from .room_state_machine import RoomStateMachine


class RoomOperations(BaseService):
    """Room creation, listing and closing."""

    def _play_url(self, room_id: str) -> str:
        return f"rtmp://{self.app_config.LIVE_HOST}/{self.app_config.LIVE_HUB}/{room_id}"

    def _validate_name(self, name: str) -> None:
        size = len(name.encode("utf-8"))
        if size == 0 or size > self.app_config.ROOM_NAME_MAX_LENGTH:
            raise AppError(
                AppErrorCode.E_INVALID_ROOM_NAME,
                f"Room name must be 1-{self.app_config.ROOM_NAME_MAX_LENGTH} bytes (got {size})",
            )

    async def create_room(self, creator_id: str, name: str) -> RoomResponse:
        """
        Create a single room owned by ``creator_id``.

        The open-room count is read before the insert, so concurrent creates
        can overshoot ``MAX_ROOMS`` by the number of racing requests.

        Raises:
            AppError: E_INVALID_ROOM_NAME, E_TOO_MANY_ROOMS (soft cap, see above),
                E_ROOM_NAME_USED, or E_GENERATION_EXHAUSTED when no free room
                ID was found.
        """
        self._validate_name(name)

        open_rooms = await self.store.count_open()
        if open_rooms >= self.app_config.MAX_ROOMS:
            raise AppError(
                AppErrorCode.E_TOO_MANY_ROOMS,
                f"{open_rooms} open rooms, limit is {self.app_config.MAX_ROOMS}",
            )

        if await self.store.find_open_by_name(name):
            raise AppError(AppErrorCode.E_ROOM_NAME_USED, f"Room name in use: {name}")

        async def try_insert(room_id: str) -> RoomResponse | None:
            now = self.clock()
            room = RoomResponse(
                room_id=room_id,
                name=name,
                creator=creator_id,
                play_url=self._play_url(room_id),
                rtc_room=room_id,
                status=RoomStatus.SINGLE,
                pk_partner=None,
                created_at=now,
                updated_at=now,
            )
            if await self.store.insert(room):
                return room

            # Either the open-name index or the room_id index rejected the insert
            if await self.store.find_open_by_name(name):
                raise AppError(AppErrorCode.E_ROOM_NAME_USED, f"Room name in use: {name}")
            return None

        room = await self.idgen.generate_unique(try_insert)
        logger.info(f"Room {room.room_id} ({name}) created by {creator_id}")
        return room

    async def get_room(self, room_id: str) -> RoomResponse:
        room = await self.store.get(room_id)
        if room is None:
            raise AppError(AppErrorCode.E_ROOM_NO_EXIST, f"Room not found: {room_id}")
        return room

    async def list_rooms(self) -> RoomListResponse:
        return RoomListResponse(rooms=await self.store.list_open())

    async def list_pk_candidates(self, caller_id: str) -> RoomListResponse:
        return RoomListResponse(rooms=await self.store.list_pk_candidates(exclude_creator=caller_id))

    async def close_room(self, caller_id: str, room_id: str) -> RoomResponse:
        """
        Close a room owned by ``caller_id``.

        A PK partner is reverted to single in the same store operation, so it
        is never seen paired with the closed room. The room name becomes free.

        Raises:
            AppError: E_ROOM_NO_EXIST if missing or already closed,
                E_NO_PERMISSION if the caller is not the creator.
        """
        previous = await self.store.close(
            room_id,
            from_states=RoomStateMachine.get_valid_sources(RoomStatus.CLOSED),
            creator=caller_id,
            closed_at=self.clock(),
        )
        if previous is None:
            room = await self._get_open_room(room_id)
            raise AppError(
                AppErrorCode.E_NO_PERMISSION,
                f"User {caller_id} cannot close room {room_id} created by {room.creator}",
            )

        logger.info(f"Room {room_id} closed by {caller_id} (was {previous.status})")

        closed = await self.store.get(room_id)
        return closed or previous
