from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from qlive.schemas import RoomStatus

from .serializers import serialize_utc_datetime


class CreateRoomIn(BaseModel):
    room_name: str = Field(description="Room name, 1-100 bytes, unique among live rooms")


class RoomIdIn(BaseModel):
    room_id: str = Field(description="Room to operate on, must be owned by the caller")


class RequestPKIn(RoomIdIn):
    target_room_id: str = Field(description="Single room to pair with")


class CreateRoomOut(BaseModel):
    room_id: str
    room_name: str
    play_url: str
    rtc_room: str
    rtc_token: str = Field(default="", description="Not issued by this service")


class RoomOut(BaseModel):
    room_id: str
    room_name: str
    creator: str
    play_url: str
    status: RoomStatus
    pk_partner: str | None = None
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        return serialize_utc_datetime(dt)


class ListRoomsOut(BaseModel):
    rooms: list[RoomOut]


class PKOut(BaseModel):
    room: RoomOut
    partner: RoomOut
