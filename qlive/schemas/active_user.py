"""Active user (login session) ODM schema."""

from datetime import datetime
from typing import Any

from beanie import Document, Indexed
from pydantic import field_validator
from pymongo import IndexModel

from .schema_utils import parse_mongo_datetime


class ActiveUser(Document):
    """One row per logged-in account; the token is the only credential."""

    account_id: Indexed(str, unique=True)  # type: ignore[valid-type]
    token: Indexed(str, unique=True)  # type: ignore[valid-type]

    issued_at: datetime
    # MongoDB TTL monitor removes the row once this passes
    expires_at: datetime

    @field_validator("issued_at", "expires_at", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        return parse_mongo_datetime(v)

    class Settings:
        name = "active_users"
        indexes = [
            IndexModel([("expires_at", 1)], expireAfterSeconds=0, name="expires_at_ttl"),
        ]
