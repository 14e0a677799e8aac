"""Account profile operations."""

from loguru import logger

from qlive.utils.app_errors import AppError, AppErrorCode

from ._base import BaseService
from .account_models import AccountResponse, ProfileUpdateParams


class ProfileOperations(BaseService):
    async def get_account(self, account_id: str) -> AccountResponse:
        account = await self.accounts.get(account_id)
        if account is None:
            raise AppError(AppErrorCode.E_NO_SUCH_USER, f"Account not found: {account_id}")
        return account

    async def update_profile(
        self,
        caller_id: str,
        account_id: str,
        params: ProfileUpdateParams,
    ) -> AccountResponse:
        """
        Overwrite the non-empty profile fields of ``account_id``.

        Raises:
            AppError: E_NO_SUCH_USER if the account is absent or is not the caller's.
        """
        if caller_id != account_id:
            raise AppError(
                AppErrorCode.E_NO_SUCH_USER,
                f"User {caller_id} cannot update account {account_id}",
            )

        fields = {key: value for key, value in params.model_dump().items() if value}
        if not fields:
            return await self.get_account(account_id)

        account = await self.accounts.update_profile(account_id, fields, self.clock())
        if account is None:
            raise AppError(AppErrorCode.E_NO_SUCH_USER, f"Account not found: {account_id}")

        logger.debug(f"Updated profile of {account_id}: {sorted(fields)}")
        return account
