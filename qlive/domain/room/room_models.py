"""Room domain models."""

from datetime import datetime

from pydantic import BaseModel

from qlive.schemas.room_status import RoomStatus


class RoomResponse(BaseModel):
    """Room response model."""

    room_id: str
    name: str
    creator: str
    play_url: str
    rtc_room: str
    status: RoomStatus
    pk_partner: str | None = None
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status in RoomStatus.open_states()


class RoomListResponse(BaseModel):
    """Room list response."""

    rooms: list[RoomResponse]


class PKResult(BaseModel):
    """Both sides of a PK pairing after the operation."""

    room: RoomResponse
    partner: RoomResponse
