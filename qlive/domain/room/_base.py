"""Base service for room operations."""

from collections.abc import Callable, Iterable
from datetime import datetime

from loguru import logger

from qlive.app_config import AppEnvironConfig
from qlive.domain.utils.idgen import IDGenerator
from qlive.schemas import RoomStatus
from qlive.utils.app_errors import AppError, AppErrorCode

from .room_models import RoomResponse
from .room_state_machine import RoomStateMachine
from .room_store import RoomStore


class BaseService:
    """Base service with shared room operation methods."""

    def __init__(
        self,
        store: RoomStore,
        idgen: IDGenerator,
        app_config: AppEnvironConfig,
        clock: Callable[[], datetime],
    ):
        self.store = store
        self.idgen = idgen
        self.app_config = app_config
        self.clock = clock

    async def _get_open_room(self, room_id: str) -> RoomResponse:
        """Get a room that is not closed.

        Raises:
            AppError: E_ROOM_NO_EXIST if the room is missing or closed.
        """
        room = await self.store.get(room_id)
        if room is None or RoomStateMachine.is_terminal(room.status):
            raise AppError(AppErrorCode.E_ROOM_NO_EXIST, f"Room not found: {room_id}")
        return room

    @staticmethod
    def _check_sources(from_states: Iterable[RoomStatus], to_state: RoomStatus) -> list[RoomStatus]:
        """
        Validate the expected statuses of a conditional update against the state machine.

        Raises:
            AppError: E_INVALID_REQUEST if any source cannot move to ``to_state``.
        """
        sources = list(from_states)
        invalid = [s for s in sources if not RoomStateMachine.can_transition(s, to_state)]
        if not sources or invalid:
            raise AppError(
                AppErrorCode.E_INVALID_REQUEST,
                f"Invalid state transition: {invalid or sources} -> {to_state}",
            )
        return sources

    async def _transition(
        self,
        room_id: str,
        to_state: RoomStatus,
        *,
        from_states: Iterable[RoomStatus],
        pk_partner: str | None = None,
        expect_partner: str | None = None,
        creator: str | None = None,
    ) -> RoomResponse | None:
        """Conditional status update; returns the previous room or None if it did not match."""
        return await self.store.transition(
            room_id,
            from_states=self._check_sources(from_states, to_state),
            to_state=to_state,
            pk_partner=pk_partner,
            expect_partner=expect_partner,
            creator=creator,
        )

    @staticmethod
    def ensure_in_pk(room: RoomResponse) -> None:
        """Guard for operations that need a paired room.

        Raises:
            AppError: E_ROOM_NOT_IN_PK if the room is not pk_connected.
        """
        if room.status != RoomStatus.PK_CONNECTED:
            raise AppError(
                AppErrorCode.E_ROOM_NOT_IN_PK,
                f"Room {room.room_id} is {room.status}, not in PK",
            )

    async def _revert_to_single(self, room_id: str, partner_id: str) -> bool:
        """Move a room paired with ``partner_id`` back to single.

        Returns False when the room was no longer paired with that partner.
        """
        previous = await self._transition(
            room_id,
            RoomStatus.SINGLE,
            from_states=[RoomStatus.PK_CONNECTED],
            pk_partner=None,
            expect_partner=partner_id,
        )
        if previous is None:
            logger.warning(f"Room {room_id} was not paired with {partner_id}, nothing to revert")
            return False

        logger.debug(f"Room {room_id} reverted to single (was paired with {partner_id})")
        return True
