from typing import Annotated

from fastapi import Depends, Request
from loguru import logger

from qlive.app_config import get_app_environ_config
from qlive.domain.account.account_domain import AccountService
from qlive.utils.app_errors import AppError, AppErrorCode

# Singleton instance
_account_service = AccountService()


def get_account_service() -> AccountService:
    """Get the singleton AccountService instance."""
    return _account_service


def extract_token(request: Request) -> str | None:
    """Session token from the login cookie, or from an `Authorization: Bearer` header."""
    token = request.cookies.get(get_app_environ_config().LOGIN_COOKIE_NAME)
    if token:
        return token

    scheme, _, credentials = (request.headers.get("Authorization") or "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_account_id(
    request: Request, service: AccountService = Depends(get_account_service)
) -> str:
    # Do not log the token itself.
    token = extract_token(request)
    if not token:
        raise AppError(AppErrorCode.E_NOT_LOGGED_IN, "No session token in request")

    account_id = await service.resolve_token(token)
    logger.debug("Authenticated account_id: {}", account_id)
    return account_id


CurrentAccountId = Annotated[str, Depends(get_current_account_id)]
