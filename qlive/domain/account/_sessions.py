"""Login, logout and token resolution."""

from datetime import timedelta

from loguru import logger

from qlive.utils.app_errors import AppError, AppErrorCode

from ._base import BaseService
from .account_models import AccountResponse, ActiveSession, LoginResult


class SessionOperations(BaseService):
    """Session issuance and lookup.

    At most one session exists per account; the unique ``account_id`` and
    ``token`` indexes of the session store decide races between logins.
    """

    async def get_or_create_account(self, phone_number: str) -> AccountResponse:
        account = await self.accounts.get_by_phone(phone_number)
        if account:
            return account

        async def try_insert(account_id: str) -> AccountResponse | None:
            now = self.clock()
            account = AccountResponse(
                account_id=account_id,
                phone_number=phone_number,
                created_at=now,
                updated_at=now,
            )
            if await self.accounts.insert(account):
                logger.info(f"Account {account_id} created for {phone_number}")
                return account

            # A concurrent login created the account first
            existing = await self.accounts.get_by_phone(phone_number)
            if existing:
                return existing
            return None

        return await self.account_idgen.generate_unique(try_insert)

    async def issue_session(self, account_id: str) -> ActiveSession:
        """
        Create the single session of ``account_id``.

        Raises:
            AppError: E_ALREADY_LOGGED_IN when a live session exists.
        """
        stale_removed = False

        async def try_insert(token: str) -> ActiveSession | None:
            nonlocal stale_removed

            now = self.clock()
            session = ActiveSession(
                account_id=account_id,
                token=token,
                issued_at=now,
                expires_at=now + timedelta(seconds=self.app_config.SESSION_TTL_SECONDS),
            )
            if await self.sessions.insert(session):
                return session

            existing = await self.sessions.get_by_account(account_id)
            if existing is None:
                return None  # token collision

            if not existing.is_expired(now) or stale_removed:
                raise AppError(AppErrorCode.E_ALREADY_LOGGED_IN, f"Account {account_id} already logged in")

            stale_removed = True
            removed = await self.sessions.delete_expired(now, account_id=account_id)
            logger.info(f"Removed {removed} expired session(s) of {account_id} before login")
            return await try_insert(token)

        return await self.token_idgen.generate_unique(try_insert)

    async def logout(self, account_id: str) -> bool:
        removed = await self.sessions.delete_by_account(account_id)
        if removed:
            logger.info(f"Account {account_id} logged out")
        return removed

    async def resolve_token(self, token: str) -> str:
        """
        Account ID behind a token.

        Raises:
            AppError: E_TOKEN_INVALID if no live session holds the token.
        """
        session = await self.sessions.get_live_by_token(token, self.clock()) if token else None
        if session is None:
            raise AppError(AppErrorCode.E_TOKEN_INVALID, "Token not found in active sessions")
        return session.account_id

    async def sweep_expired_sessions(self) -> int:
        removed = await self.sessions.delete_expired(self.clock())
        if removed:
            logger.info(f"Swept {removed} expired session(s)")
        return removed

    async def complete_login(self, phone_number: str) -> LoginResult:
        account = await self.get_or_create_account(phone_number)
        session = await self.issue_session(account.account_id)
        logger.info(f"Account {account.account_id} logged in")
        return LoginResult(token=session.token, expires_at=session.expires_at, account=account)
