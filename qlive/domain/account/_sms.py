"""SMS verification code operations."""

import re

from loguru import logger

from qlive.utils.app_errors import AppError, AppErrorCode

from ._base import BaseService

PHONE_NUMBER_PATTERN = re.compile(r"1[3-9][0-9]{9}")
SMS_CODE_LENGTH = 6


def validate_phone_number(phone_number: str | None) -> str:
    if not phone_number or not PHONE_NUMBER_PATTERN.fullmatch(phone_number):
        raise AppError(AppErrorCode.E_INVALID_PHONE_NUMBER, f"Invalid phone number: {phone_number!r}")
    return phone_number


class SMSOperations(BaseService):
    """Issue and check one-time login codes."""

    def _new_code(self) -> str:
        return f"{self.rng.randrange(10 ** SMS_CODE_LENGTH):0{SMS_CODE_LENGTH}d}"

    async def send_verification_code(self, phone_number: str) -> None:
        """
        Store a new code for ``phone_number`` and send it.

        Raises:
            AppError: E_INVALID_PHONE_NUMBER, E_SMS_TOO_FREQUENT inside the resend
                interval, E_SMS_SEND_FAILED when the gateway did not deliver.
        """
        validate_phone_number(phone_number)

        code = self._new_code()
        saved = await self.sms_codes.save_code(
            phone_number,
            code,
            ttl=self.app_config.SMS_CODE_TTL_SECONDS,
            resend_interval=self.app_config.SMS_RESEND_INTERVAL_SECONDS,
        )
        if not saved:
            raise AppError(
                AppErrorCode.E_SMS_TOO_FREQUENT,
                f"Code for {phone_number} sent less than "
                f"{self.app_config.SMS_RESEND_INTERVAL_SECONDS}s ago",
            )

        if not await self.sms_gateway.send_code(phone_number, code):
            await self.sms_codes.discard_code(phone_number, code)
            raise AppError(AppErrorCode.E_SMS_SEND_FAILED, f"Gateway did not deliver code to {phone_number}")

        logger.info(f"Verification code sent to {phone_number}")

    async def validate_code(self, phone_number: str, code: str) -> None:
        """
        Consume the code; a second call with the same code fails.

        Raises:
            AppError: E_INVALID_PHONE_NUMBER or E_INVALID_CODE.
        """
        validate_phone_number(phone_number)
        if not code or not await self.sms_codes.consume_code(phone_number, code):
            raise AppError(AppErrorCode.E_INVALID_CODE, f"Wrong or expired code for {phone_number}")
