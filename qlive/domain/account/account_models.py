"""Account domain models."""

from datetime import datetime

from pydantic import BaseModel


class AccountResponse(BaseModel):
    """Account response model."""

    account_id: str
    phone_number: str
    nickname: str = ""
    gender: str = ""
    created_at: datetime
    updated_at: datetime


class ActiveSession(BaseModel):
    """Server-side record binding a token to a logged-in account."""

    account_id: str
    token: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class LoginResult(BaseModel):
    token: str
    expires_at: datetime
    account: AccountResponse


class ProfileUpdateParams(BaseModel):
    """Parameters for updating a profile. Empty values leave the field unchanged."""

    nickname: str | None = None
    gender: str | None = None
