"""Base service for account operations."""

import random
from collections.abc import Callable
from datetime import datetime

from qlive.app_config import AppEnvironConfig
from qlive.domain.utils.idgen import IDGenerator
from qlive.services.integrations.sms_gateway import SMSGateway

from .account_store import AccountStore, ActiveSessionStore
from .sms_code_store import SMSCodeStore


class BaseService:
    """Collaborators shared by the account operations."""

    def __init__(
        self,
        *,
        accounts: AccountStore,
        sessions: ActiveSessionStore,
        sms_codes: SMSCodeStore,
        sms_gateway: SMSGateway,
        account_idgen: IDGenerator,
        token_idgen: IDGenerator,
        app_config: AppEnvironConfig,
        rng: random.Random,
        clock: Callable[[], datetime],
    ):
        self.accounts = accounts
        self.sessions = sessions
        self.sms_codes = sms_codes
        self.sms_gateway = sms_gateway
        self.account_idgen = account_idgen
        self.token_idgen = token_idgen
        self.app_config = app_config
        self.rng = rng
        self.clock = clock
