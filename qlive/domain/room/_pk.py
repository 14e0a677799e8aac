"""PK pairing operations."""

from typing import NoReturn

from loguru import logger

from qlive.schemas import RoomStatus
from qlive.utils.app_errors import AppError, AppErrorCode

from ._base import BaseService
from .room_models import PKResult, RoomResponse


class PKOperations(BaseService):
    """Pairing and unpairing of two single rooms.

    Both rooms are moved with separate conditional updates keyed on their
    expected status. When the second update fails the first one is undone,
    so no caller ever observes a one-sided pairing as a success.
    """

    async def _raise_not_pairable(self, room_id: str, caller_id: str | None = None) -> NoReturn:
        room = await self._get_open_room(room_id)
        if caller_id is not None and room.creator != caller_id:
            raise AppError(
                AppErrorCode.E_NO_PERMISSION,
                f"User {caller_id} does not own room {room_id}",
            )
        raise AppError(AppErrorCode.E_ROOM_IN_PK, f"Room {room_id} is {room.status}")

    async def request_pk(
        self,
        caller_room_id: str,
        target_room_id: str,
        *,
        caller_id: str | None = None,
    ) -> PKResult:
        """
        Pair two single rooms.

        Raises:
            AppError: E_INVALID_REQUEST for the same room twice, E_ROOM_NO_EXIST,
                E_ROOM_IN_PK, or E_NO_PERMISSION when ``caller_id`` does not
                own the caller room.
        """
        if caller_room_id == target_room_id:
            raise AppError(AppErrorCode.E_INVALID_REQUEST, "A room cannot PK with itself")

        caller_prev = await self._transition(
            caller_room_id,
            RoomStatus.PK_CONNECTED,
            from_states=[RoomStatus.SINGLE],
            pk_partner=target_room_id,
            creator=caller_id,
        )
        if caller_prev is None:
            await self._raise_not_pairable(caller_room_id, caller_id=caller_id)

        target_prev = await self._transition(
            target_room_id,
            RoomStatus.PK_CONNECTED,
            from_states=[RoomStatus.SINGLE],
            pk_partner=caller_room_id,
        )
        if target_prev is None:
            await self._revert_to_single(caller_room_id, partner_id=target_room_id)
            await self._raise_not_pairable(target_room_id)

        # The caller room may have been closed or unpaired between the two updates
        caller_room = await self.store.get(caller_room_id)
        if (
            caller_room is None
            or caller_room.status != RoomStatus.PK_CONNECTED
            or caller_room.pk_partner != target_room_id
        ):
            await self._revert_to_single(target_room_id, partner_id=caller_room_id)
            if caller_room is None or not caller_room.is_open:
                raise AppError(AppErrorCode.E_ROOM_NO_EXIST, f"Room {caller_room_id} closed during PK")
            raise AppError(AppErrorCode.E_ROOM_NOT_IN_PK, f"Room {caller_room_id} left PK during pairing")

        target_room = await self.store.get(target_room_id)
        logger.info(f"PK started: {caller_room_id} <-> {target_room_id}")
        return PKResult(room=caller_room, partner=target_room)  # type: ignore[arg-type]

    async def end_pk(self, caller_id: str, room_id: str) -> RoomResponse:
        """
        End the PK of ``room_id`` from its creator's side; both rooms go back to single.

        Raises:
            AppError: E_ROOM_NO_EXIST, E_NO_PERMISSION or E_ROOM_NOT_IN_PK.
        """
        room = await self._get_open_room(room_id)
        if room.creator != caller_id:
            raise AppError(
                AppErrorCode.E_NO_PERMISSION,
                f"User {caller_id} does not own room {room_id}",
            )
        self.ensure_in_pk(room)

        partner_id = room.pk_partner
        previous = await self._transition(
            room_id,
            RoomStatus.SINGLE,
            from_states=[RoomStatus.PK_CONNECTED],
            pk_partner=None,
            expect_partner=partner_id,
            creator=caller_id,
        )
        if previous is None:
            # Closed or unpaired concurrently; report what the room looks like now
            self.ensure_in_pk(await self._get_open_room(room_id))
            raise AppError(AppErrorCode.E_ROOM_NOT_IN_PK, f"Room {room_id} changed PK partner")

        if partner_id:
            await self._revert_to_single(partner_id, partner_id=room_id)

        logger.info(f"PK ended by {caller_id}: {room_id} <-> {partner_id}")
        return await self._get_open_room(room_id)
