"""Account domain service - SMS login, sessions and profiles."""

import random
from collections.abc import Callable
from datetime import datetime

from qlive.app_config import AppEnvironConfig, get_app_environ_config
from qlive.domain.utils.idgen import IDGenerator, new_account_id_generator, new_token_generator
from qlive.services.integrations.sms_gateway import SMSGateway, get_sms_gateway
from qlive.shared.utils import utc_now

from ._profile import ProfileOperations
from ._sessions import SessionOperations
from ._sms import SMSOperations
from .account_models import AccountResponse, LoginResult, ProfileUpdateParams
from .account_store import (
    AccountStore,
    ActiveSessionStore,
    MongoAccountStore,
    MongoActiveSessionStore,
)
from .sms_code_store import RedisSMSCodeStore, SMSCodeStore


class AccountService:
    """Account authentication service.

    Every collaborator is injectable; the defaults are the MongoDB and Redis
    stores, the configured SMS gateway and ``random.SystemRandom``.
    """

    def __init__(
        self,
        accounts: AccountStore | None = None,
        sessions: ActiveSessionStore | None = None,
        sms_codes: SMSCodeStore | None = None,
        sms_gateway: SMSGateway | None = None,
        account_idgen: IDGenerator | None = None,
        token_idgen: IDGenerator | None = None,
        app_config: AppEnvironConfig | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        app_config = app_config or get_app_environ_config()
        rng = rng or random.SystemRandom()

        deps = dict(
            accounts=accounts or MongoAccountStore(),
            sessions=sessions or MongoActiveSessionStore(),
            sms_codes=sms_codes or RedisSMSCodeStore(),
            sms_gateway=sms_gateway or get_sms_gateway(app_config),
            account_idgen=account_idgen or new_account_id_generator(rng, app_config.ID_MAX_ATTEMPTS),
            token_idgen=token_idgen or new_token_generator(rng, app_config.ID_MAX_ATTEMPTS),
            app_config=app_config,
            rng=rng,
            clock=clock,
        )
        self._sms = SMSOperations(**deps)
        self._sessions = SessionOperations(**deps)
        self._profile = ProfileOperations(**deps)

    # ==================== SMS ====================

    async def send_verification_code(self, phone_number: str) -> None:
        await self._sms.send_verification_code(phone_number)

    async def validate_code(self, phone_number: str, code: str) -> None:
        await self._sms.validate_code(phone_number, code)

    # ==================== SESSIONS ====================

    async def login(self, phone_number: str, code: str) -> LoginResult:
        """Log in with an SMS code, creating the account on first login.

        Raises AppError (E_INVALID_CODE, E_ALREADY_LOGGED_IN, ...).
        """
        await self._sms.validate_code(phone_number, code)
        return await self._sessions.complete_login(phone_number)

    async def logout(self, account_id: str) -> bool:
        """Remove the session. Returns False if there was none."""
        return await self._sessions.logout(account_id)

    async def resolve_token(self, token: str) -> str:
        return await self._sessions.resolve_token(token)

    async def sweep_expired_sessions(self) -> int:
        return await self._sessions.sweep_expired_sessions()

    # ==================== PROFILE ====================

    async def get_account(self, account_id: str) -> AccountResponse:
        return await self._profile.get_account(account_id)

    async def update_profile(
        self,
        caller_id: str,
        account_id: str,
        params: ProfileUpdateParams,
    ) -> AccountResponse:
        return await self._profile.update_profile(caller_id, account_id, params)
