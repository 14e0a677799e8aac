import random

import pytest

from qlive.domain.account.account_domain import AccountService


@pytest.fixture
def account_service(
    account_store, session_store, sms_code_store, sms_gateway, app_config, clock
) -> AccountService:
    return AccountService(
        accounts=account_store,
        sessions=session_store,
        sms_codes=sms_code_store,
        sms_gateway=sms_gateway,
        app_config=app_config,
        rng=random.Random(7),
        clock=clock,
    )


@pytest.fixture
def login(account_service, sms_gateway):
    """Send a code to ``phone`` and log in with it."""

    async def _login(phone: str):
        await account_service.send_verification_code(phone)
        return await account_service.login(phone, sms_gateway.last_code(phone))

    return _login
