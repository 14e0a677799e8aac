"""Account and active session persistence."""

from abc import ABC, abstractmethod
from datetime import datetime

from beanie import UpdateResponse
from beanie.operators import Set
from loguru import logger
from pymongo.errors import DuplicateKeyError

from qlive.schemas import Account, ActiveUser

from .account_models import AccountResponse, ActiveSession


class AccountStore(ABC):
    @abstractmethod
    async def get(self, account_id: str) -> AccountResponse | None: ...

    @abstractmethod
    async def get_by_phone(self, phone_number: str) -> AccountResponse | None: ...

    @abstractmethod
    async def insert(self, account: AccountResponse) -> bool:
        """Insert a new account. Returns False when a unique index rejected it."""

    @abstractmethod
    async def update_profile(
        self, account_id: str, fields: dict[str, str], updated_at: datetime
    ) -> AccountResponse | None:
        """Overwrite profile fields. Returns the updated account, or None if absent."""


class ActiveSessionStore(ABC):
    @abstractmethod
    async def get_by_account(self, account_id: str) -> ActiveSession | None: ...

    @abstractmethod
    async def get_live_by_token(self, token: str, now: datetime) -> ActiveSession | None:
        """Session holding ``token`` that has not expired at ``now``."""

    @abstractmethod
    async def insert(self, session: ActiveSession) -> bool:
        """Insert a session. Returns False on an ``account_id`` or ``token`` conflict."""

    @abstractmethod
    async def delete_by_account(self, account_id: str) -> bool:
        """Returns whether a session was removed."""

    @abstractmethod
    async def delete_expired(self, now: datetime, account_id: str | None = None) -> int:
        """Delete sessions expired at ``now``, optionally only the one of ``account_id``."""


class MongoAccountStore(AccountStore):
    """Account store backed by the ``accounts`` collection."""

    async def get(self, account_id: str) -> AccountResponse | None:
        account = await Account.find_one(Account.account_id == account_id)
        return AccountResponse(**account.model_dump(exclude={"id"})) if account else None

    async def get_by_phone(self, phone_number: str) -> AccountResponse | None:
        account = await Account.find_one(Account.phone_number == phone_number)
        return AccountResponse(**account.model_dump(exclude={"id"})) if account else None

    async def insert(self, account: AccountResponse) -> bool:
        try:
            await Account(**account.model_dump()).insert()
        except DuplicateKeyError as e:
            logger.debug("Account insert rejected for {}: {}", account.account_id, e)
            return False
        return True

    async def update_profile(
        self, account_id: str, fields: dict[str, str], updated_at: datetime
    ) -> AccountResponse | None:
        update_fields = {**fields, "updated_at": updated_at}
        account = await Account.find_one(Account.account_id == account_id).update(
            Set(update_fields),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
        return AccountResponse(**account.model_dump(exclude={"id"})) if account else None


class MongoActiveSessionStore(ActiveSessionStore):
    """Session store backed by the ``active_users`` collection."""

    async def get_by_account(self, account_id: str) -> ActiveSession | None:
        row = await ActiveUser.find_one(ActiveUser.account_id == account_id)
        return ActiveSession(**row.model_dump(exclude={"id"})) if row else None

    async def get_live_by_token(self, token: str, now: datetime) -> ActiveSession | None:
        row = await ActiveUser.find_one(ActiveUser.token == token, ActiveUser.expires_at > now)
        return ActiveSession(**row.model_dump(exclude={"id"})) if row else None

    async def insert(self, session: ActiveSession) -> bool:
        try:
            await ActiveUser(**session.model_dump()).insert()
        except DuplicateKeyError as e:
            logger.debug("Session insert rejected for {}: {}", session.account_id, e)
            return False
        return True

    async def delete_by_account(self, account_id: str) -> bool:
        result = await ActiveUser.find(ActiveUser.account_id == account_id).delete()
        return bool(result and result.deleted_count)

    async def delete_expired(self, now: datetime, account_id: str | None = None) -> int:
        conditions = [ActiveUser.expires_at <= now]
        if account_id is not None:
            conditions.append(ActiveUser.account_id == account_id)
        result = await ActiveUser.find(*conditions).delete()
        return result.deleted_count if result else 0
