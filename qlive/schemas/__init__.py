"""Beanie ODM schemas for MongoDB collections."""

from .account import Account
from .active_user import ActiveUser
from .init import DOCUMENT_MODELS, init_beanie_odm
from .live_room import LiveRoom
from .room_status import RoomStatus

__all__ = [
    "DOCUMENT_MODELS",
    "Account",
    "ActiveUser",
    "LiveRoom",
    "RoomStatus",
    "init_beanie_odm",
]
