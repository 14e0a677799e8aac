from pydantic import BaseModel

from qlive.shared.config import config


class AppEnvironConfig(BaseModel):
    # Public demo switch: when enabled, the SMS gateway only logs codes instead of sending them.
    DEMO_MODE: bool = config.get("DEMO_MODE", "true").strip().lower() == "true"  # type: ignore

    # Live streaming configuration (play URL = rtmp://<LIVE_HOST>/<LIVE_HUB>/<room_id>)
    LIVE_HOST: str = config.get("LIVE_HOST", "pili-live-rtmp.example.com").strip()  # type: ignore
    LIVE_HUB: str = config.get("LIVE_HUB", "qlive").strip()  # type: ignore
    MAX_ROOMS: int = int((config.get("MAX_ROOMS") or "").strip() or 1000)
    ROOM_NAME_MAX_LENGTH: int = 100

    # Session configuration
    SESSION_TTL_SECONDS: int = int((config.get("SESSION_TTL_SECONDS") or "").strip() or 7 * 24 * 3600)
    LOGIN_COOKIE_NAME: str = config.get("LOGIN_COOKIE_NAME", "qlive_token").strip()  # type: ignore
    LOGIN_COOKIE_DOMAIN: str | None = (config.get("LOGIN_COOKIE_DOMAIN") or "").strip() or None
    LOGIN_COOKIE_SECURE: bool = config.get("LOGIN_COOKIE_SECURE", "true").strip().lower() == "true"  # type: ignore

    # SMS verification configuration
    SMS_CODE_TTL_SECONDS: int = int((config.get("SMS_CODE_TTL_SECONDS") or "").strip() or 300)
    SMS_RESEND_INTERVAL_SECONDS: int = int(
        (config.get("SMS_RESEND_INTERVAL_SECONDS") or "").strip() or 60
    )
    SMS_GATEWAY_URL: str | None = (config.get("SMS_GATEWAY_URL") or "").strip() or None
    SMS_GATEWAY_API_KEY: str | None = (config.get("SMS_GATEWAY_API_KEY") or "").strip() or None
    SMS_TEMPLATE_ID: str = config.get("SMS_TEMPLATE_ID", "qlive_login").strip()  # type: ignore

    # Identifier generation
    ID_MAX_ATTEMPTS: int = int((config.get("ID_MAX_ATTEMPTS") or "").strip() or 5)


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
