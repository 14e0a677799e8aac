import random

import pytest

from qlive.domain.room.room_domain import RoomService
from qlive.domain.room.room_models import RoomResponse
from qlive.domain.utils.idgen import new_room_id_generator
from qlive.schemas import RoomStatus


@pytest.fixture
def room_service(room_store, app_config, clock) -> RoomService:
    return RoomService(
        store=room_store,
        idgen=new_room_id_generator(random.Random(2024), max_attempts=app_config.ID_MAX_ATTEMPTS),
        app_config=app_config,
        clock=clock,
    )


@pytest.fixture
def make_room(clock):
    """Build a room record for seeding a store directly."""

    def _make_room(room_id: str, name: str, creator: str = "someone", **kwargs) -> RoomResponse:
        fields = dict(
            room_id=room_id,
            name=name,
            creator=creator,
            play_url=f"rtmp://live.test.example.com/qlive-test/{room_id}",
            rtc_room=room_id,
            status=RoomStatus.SINGLE,
            created_at=clock(),
            updated_at=clock(),
        )
        fields.update(kwargs)
        return RoomResponse(**fields)

    return _make_room
