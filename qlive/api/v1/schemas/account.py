from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from .serializers import serialize_utc_datetime


class LoginIn(BaseModel):
    phone_number: str = Field(description="Mainland China mobile number, 11 digits")
    sms_code: str = Field(description="Code received by SMS")


class UpdateProfileIn(BaseModel):
    nickname: str | None = Field(default=None, description="New nickname, empty keeps the current one")
    gender: str | None = Field(default=None, description="New gender, empty keeps the current one")


class AccountOut(BaseModel):
    account_id: str
    phone_number: str
    nickname: str
    gender: str


class LoginOut(AccountOut):
    token: str = Field(description="Session token, also set as cookie")
    expires_at: datetime

    @field_serializer("expires_at")
    def serialize_expires_at(self, dt: datetime) -> str:
        return serialize_utc_datetime(dt)
