"""Room domain service - live room lifecycle and PK pairing."""

from collections.abc import Callable
from datetime import datetime

from qlive.app_config import AppEnvironConfig, get_app_environ_config
from qlive.domain.utils.idgen import IDGenerator, new_room_id_generator
from qlive.shared.utils import utc_now

from ._pk import PKOperations
from ._rooms import RoomOperations
from .room_models import PKResult, RoomListResponse, RoomResponse
from .room_store import MongoRoomStore, RoomStore


class RoomService:
    """Room lifecycle service.

    Storage, ID generation, settings and the clock are injectable; the
    defaults are the MongoDB store and the configured application settings.
    """

    def __init__(
        self,
        store: RoomStore | None = None,
        idgen: IDGenerator | None = None,
        app_config: AppEnvironConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        app_config = app_config or get_app_environ_config()
        store = store or MongoRoomStore()
        idgen = idgen or new_room_id_generator(max_attempts=app_config.ID_MAX_ATTEMPTS)

        self._rooms = RoomOperations(store, idgen, app_config, clock)
        self._pk = PKOperations(store, idgen, app_config, clock)

    # ==================== ROOMS ====================

    async def create_room(self, creator_id: str, name: str) -> RoomResponse:
        """Create a single room. Raises AppError on invalid or used names."""
        return await self._rooms.create_room(creator_id=creator_id, name=name)

    async def get_room(self, room_id: str) -> RoomResponse:
        return await self._rooms.get_room(room_id)

    async def list_rooms(self) -> RoomListResponse:
        """All rooms that are not closed."""
        return await self._rooms.list_rooms()

    async def list_pk_candidates(self, caller_id: str) -> RoomListResponse:
        """Single rooms not created by the caller."""
        return await self._rooms.list_pk_candidates(caller_id)

    async def close_room(self, caller_id: str, room_id: str) -> RoomResponse:
        return await self._rooms.close_room(caller_id=caller_id, room_id=room_id)

    # ==================== PK ====================

    async def request_pk(
        self,
        caller_room_id: str,
        target_room_id: str,
        *,
        caller_id: str | None = None,
    ) -> PKResult:
        return await self._pk.request_pk(caller_room_id, target_room_id, caller_id=caller_id)

    async def end_pk(self, caller_id: str, room_id: str) -> RoomResponse:
        return await self._pk.end_pk(caller_id=caller_id, room_id=room_id)
