"""Tests for verification code issuance and validation."""

import asyncio

import pytest

from qlive.utils.app_errors import AppError, AppErrorCode

PHONE = "13800138000"


class TestSendVerificationCode:
    async def test_sends_six_digit_code(self, account_service, sms_gateway, sms_code_store):
        await account_service.send_verification_code(PHONE)

        code = sms_gateway.last_code(PHONE)
        assert len(code) == 6 and code.isdigit()
        assert sms_code_store.codes[PHONE][0] == code

    @pytest.mark.parametrize(
        "phone",
        ["", "12800138000", "1380013800", "138001380001", "+8613800138000", "1380013800a", " 13800138000"],
    )
    async def test_invalid_phone_numbers(self, account_service, sms_gateway, phone):
        with pytest.raises(AppError) as exc_info:
            await account_service.send_verification_code(phone)

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_PHONE_NUMBER
        assert sms_gateway.sent == []

    async def test_resend_inside_window_is_too_frequent(self, account_service, clock):
        await account_service.send_verification_code(PHONE)
        clock.advance(59)

        with pytest.raises(AppError) as exc_info:
            await account_service.send_verification_code(PHONE)

        assert exc_info.value.errcode == AppErrorCode.E_SMS_TOO_FREQUENT

    async def test_resend_after_window_invalidates_previous_code(
        self, account_service, sms_gateway, clock
    ):
        await account_service.send_verification_code(PHONE)
        old_code = sms_gateway.last_code(PHONE)
        clock.advance(61)

        await account_service.send_verification_code(PHONE)
        new_code = sms_gateway.last_code(PHONE)

        if old_code != new_code:
            with pytest.raises(AppError) as exc_info:
                await account_service.validate_code(PHONE, old_code)
            assert exc_info.value.errcode == AppErrorCode.E_INVALID_CODE

        await account_service.validate_code(PHONE, new_code)

    async def test_other_phone_is_not_throttled(self, account_service):
        await account_service.send_verification_code(PHONE)
        await account_service.send_verification_code("13900139000")

    async def test_gateway_failure_discards_code(self, account_service, sms_gateway, sms_code_store):
        sms_gateway.deliver = False

        with pytest.raises(AppError) as exc_info:
            await account_service.send_verification_code(PHONE)

        assert exc_info.value.errcode == AppErrorCode.E_SMS_SEND_FAILED
        assert PHONE not in sms_code_store.codes

        # the resend window is released, so the user can retry right away
        sms_gateway.deliver = True
        await account_service.send_verification_code(PHONE)


class TestValidateCode:
    async def test_code_is_single_use(self, account_service, sms_gateway):
        await account_service.send_verification_code(PHONE)
        code = sms_gateway.last_code(PHONE)

        await account_service.validate_code(PHONE, code)

        with pytest.raises(AppError) as exc_info:
            await account_service.validate_code(PHONE, code)
        assert exc_info.value.errcode == AppErrorCode.E_INVALID_CODE

    async def test_wrong_code(self, account_service, sms_gateway):
        await account_service.send_verification_code(PHONE)
        code = sms_gateway.last_code(PHONE)
        wrong = "000000" if code != "000000" else "111111"

        with pytest.raises(AppError) as exc_info:
            await account_service.validate_code(PHONE, wrong)
        assert exc_info.value.errcode == AppErrorCode.E_INVALID_CODE

        # a wrong guess does not burn the real code
        await account_service.validate_code(PHONE, code)

    async def test_expired_code(self, account_service, sms_gateway, clock):
        await account_service.send_verification_code(PHONE)
        clock.advance(301)

        with pytest.raises(AppError) as exc_info:
            await account_service.validate_code(PHONE, sms_gateway.last_code(PHONE))

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_CODE

    async def test_no_code_sent(self, account_service):
        with pytest.raises(AppError) as exc_info:
            await account_service.validate_code(PHONE, "123456")

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_CODE

    async def test_empty_code(self, account_service):
        with pytest.raises(AppError) as exc_info:
            await account_service.validate_code(PHONE, "")

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_CODE


class TestConcurrentSend:
    async def test_only_one_concurrent_send_goes_out(self, account_service, sms_gateway):
        results = await asyncio.gather(
            *(account_service.send_verification_code(PHONE) for _ in range(5)),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, AppError)]
        assert results.count(None) == 1
        assert len(failures) == 4
        assert all(f.errcode == AppErrorCode.E_SMS_TOO_FREQUENT for f in failures)
        assert len(sms_gateway.sent) == 1
