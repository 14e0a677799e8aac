"""Live room ODM schema."""

from datetime import datetime
from typing import Any

from beanie import Document, Indexed
from pydantic import field_validator
from pymongo import IndexModel

from .room_status import RoomStatus
from .schema_utils import parse_mongo_datetime


class LiveRoom(Document):
    """Live room document model."""

    room_id: Indexed(str, unique=True)  # type: ignore[valid-type]
    name: str
    creator: Indexed(str)  # type: ignore[valid-type]

    # Playback / RTC identifiers
    play_url: str
    rtc_room: str

    # Lifecycle
    status: RoomStatus = RoomStatus.SINGLE
    pk_partner: str | None = None  # set iff status == pk_connected
    is_open: bool = True  # status != closed, kept in the same write as status

    # Timestamps
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None

    @field_validator("created_at", "updated_at", "closed_at", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        return parse_mongo_datetime(v)

    class Settings:
        name = "rooms"
        indexes = [
            [("room_id", 1)],  # unique handled by Indexed
            IndexModel(
                [("name", 1)],
                partialFilterExpression={"is_open": True},
                unique=True,
                name="name_open_unique",
            ),
            IndexModel([("is_open", 1), ("created_at", -1)], name="is_open_created_at"),
            IndexModel([("status", 1), ("created_at", -1)], name="status_created_at"),
        ]
