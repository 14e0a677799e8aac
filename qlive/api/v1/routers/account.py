from fastapi import APIRouter, Depends, Query, Response

from qlive.api.v1.dependency import CurrentAccountId, get_account_service
from qlive.api.v1.schemas.account import AccountOut, LoginIn, LoginOut, UpdateProfileIn
from qlive.api.v1.schemas.base import ApiOut
from qlive.app_config import get_app_environ_config
from qlive.domain.account.account_domain import AccountService
from qlive.domain.account.account_models import AccountResponse, ProfileUpdateParams
from qlive.utils.app_errors import AppError, AppErrorCode

router = APIRouter(prefix="/account")

SMS_CODE_LOGIN_TYPE = "smscode"


def _account_out(account: AccountResponse) -> AccountOut:
    return AccountOut(
        account_id=account.account_id,
        phone_number=account.phone_number,
        nickname=account.nickname,
        gender=account.gender,
    )


@router.get("/send_sms_code")
async def send_sms_code(
    phone_number: str = Query(..., description="Phone number to receive the code"),
    service: AccountService = Depends(get_account_service),
) -> ApiOut[str]:
    """Send a login code by SMS."""
    await service.send_verification_code(phone_number)
    return ApiOut[str](results="OK")


@router.post("/login")
async def login(
    body: LoginIn,
    response: Response,
    logintype: str = Query(SMS_CODE_LOGIN_TYPE, description="Only `smscode` is supported"),
    service: AccountService = Depends(get_account_service),
) -> ApiOut[LoginOut]:
    """Log in with phone number and SMS code; the token is also set as a cookie."""
    if logintype != SMS_CODE_LOGIN_TYPE:
        raise AppError(AppErrorCode.E_BAD_LOGIN_TYPE, f"Unsupported login type: {logintype}")

    result = await service.login(body.phone_number, body.sms_code)

    app_config = get_app_environ_config()
    response.set_cookie(
        key=app_config.LOGIN_COOKIE_NAME,
        value=result.token,
        expires=result.expires_at,
        domain=app_config.LOGIN_COOKIE_DOMAIN,
        secure=app_config.LOGIN_COOKIE_SECURE,
        httponly=True,
        samesite="lax",
    )

    account_out = _account_out(result.account)
    return ApiOut[LoginOut](
        results=LoginOut(**account_out.model_dump(), token=result.token, expires_at=result.expires_at)
    )


@router.post("/logout")
async def logout(
    response: Response,
    account_id: CurrentAccountId,
    service: AccountService = Depends(get_account_service),
) -> ApiOut[str]:
    if not await service.logout(account_id):
        raise AppError(AppErrorCode.E_NOT_LOGGED_IN, f"Account {account_id} has no session")

    app_config = get_app_environ_config()
    response.delete_cookie(key=app_config.LOGIN_COOKIE_NAME, domain=app_config.LOGIN_COOKIE_DOMAIN)
    return ApiOut[str](results="OK")


@router.get("/profile")
async def get_profile(
    account_id: CurrentAccountId,
    service: AccountService = Depends(get_account_service),
) -> ApiOut[AccountOut]:
    account = await service.get_account(account_id)
    return ApiOut[AccountOut](results=_account_out(account))


@router.post("/update_profile")
async def update_profile(
    body: UpdateProfileIn,
    account_id: CurrentAccountId,
    service: AccountService = Depends(get_account_service),
) -> ApiOut[AccountOut]:
    """Update nickname and/or gender of the logged-in account."""
    account = await service.update_profile(
        caller_id=account_id,
        account_id=account_id,
        params=ProfileUpdateParams(nickname=body.nickname, gender=body.gender),
    )
    return ApiOut[AccountOut](results=_account_out(account))
