"""Account ODM schema."""

from datetime import datetime
from typing import Any

from beanie import Document, Indexed
from pydantic import field_validator

from .schema_utils import parse_mongo_datetime


class Account(Document):
    """Account document model."""

    account_id: Indexed(str, unique=True)  # type: ignore[valid-type]
    phone_number: Indexed(str, unique=True)  # type: ignore[valid-type]

    # Profile
    nickname: str = ""
    gender: str = ""

    # Timestamps
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        return parse_mongo_datetime(v)

    class Settings:
        name = "accounts"
