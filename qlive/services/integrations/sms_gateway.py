"""Outbound SMS delivery for verification codes."""

from abc import ABC, abstractmethod

import httpx
from loguru import logger

from qlive.app_config import AppEnvironConfig, get_app_environ_config


class SMSGateway(ABC):
    @abstractmethod
    async def send_code(self, phone_number: str, code: str) -> bool:
        """Deliver ``code`` to ``phone_number``. Returns False when the provider refused it."""


class DemoSMSGateway(SMSGateway):
    """Logs the code instead of sending it (DEMO_MODE=true)."""

    async def send_code(self, phone_number: str, code: str) -> bool:
        logger.info("SMS gateway DEMO_MODE=true: code {} for {}", code, phone_number)
        return True


class HttpSMSGateway(SMSGateway):
    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        template_id: str = "qlive_login",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.template_id = template_id
        self.transport = transport

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    async def send_code(self, phone_number: str, code: str) -> bool:
        url = f"{self.base_url}/v1/message"
        body = {
            "template_id": self.template_id,
            "mobile": phone_number,
            "parameters": {"code": code},
        }
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(url, json=body, headers=self._build_headers(), timeout=10)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("SMS gateway request for {} failed: {}", phone_number, e)
            return False

        logger.debug("SMS gateway accepted code for {}: {}", phone_number, response.status_code)
        return True


def get_sms_gateway(app_config: AppEnvironConfig | None = None) -> SMSGateway:
    """Build the gateway for the current settings."""
    app_config = app_config or get_app_environ_config()
    if app_config.DEMO_MODE or not app_config.SMS_GATEWAY_URL:
        if not app_config.DEMO_MODE:
            logger.warning("SMS_GATEWAY_URL not set, verification codes are only logged")
        return DemoSMSGateway()

    return HttpSMSGateway(
        base_url=app_config.SMS_GATEWAY_URL,
        api_key=app_config.SMS_GATEWAY_API_KEY,
        template_id=app_config.SMS_TEMPLATE_ID,
    )
