"""Application error codes and their transport mapping.

Every failure raised by the account and room services is an ``AppError``
carrying an ``AppErrorCode``. ``ERROR_TABLE`` maps each code to the HTTP
status and the user-facing message the API returns; anything that is not an
``AppError`` is reported as an internal error without exposing its details.
"""

import inspect
from enum import Enum, IntEnum
from typing import NamedTuple
from uuid import uuid4


class HttpStatusCode(IntEnum):
    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503


class AppErrorCode(str, Enum):
    # Input validation
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"
    E_INVALID_PHONE_NUMBER = "E_INVALID_PHONE_NUMBER"
    E_INVALID_CODE = "E_INVALID_CODE"
    E_INVALID_ROOM_NAME = "E_INVALID_ROOM_NAME"
    E_BAD_LOGIN_TYPE = "E_BAD_LOGIN_TYPE"

    # Authentication
    E_TOKEN_INVALID = "E_TOKEN_INVALID"
    E_ALREADY_LOGGED_IN = "E_ALREADY_LOGGED_IN"
    E_NOT_LOGGED_IN = "E_NOT_LOGGED_IN"

    # Authorization
    E_NO_PERMISSION = "E_NO_PERMISSION"

    # State conflicts / lookups
    E_NO_SUCH_USER = "E_NO_SUCH_USER"
    E_ROOM_NO_EXIST = "E_ROOM_NO_EXIST"
    E_ROOM_NAME_USED = "E_ROOM_NAME_USED"
    E_ROOM_IN_PK = "E_ROOM_IN_PK"
    E_ROOM_NOT_IN_PK = "E_ROOM_NOT_IN_PK"

    # Capacity / rate
    E_SMS_TOO_FREQUENT = "E_SMS_TOO_FREQUENT"
    E_TOO_MANY_ROOMS = "E_TOO_MANY_ROOMS"

    # Upstream / internal
    E_SMS_SEND_FAILED = "E_SMS_SEND_FAILED"
    E_GENERATION_EXHAUSTED = "E_GENERATION_EXHAUSTED"
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"

    def __str__(self) -> str:
        return self.value


class ErrorSpec(NamedTuple):
    status_code: HttpStatusCode
    message: str


ERROR_TABLE: dict[AppErrorCode, ErrorSpec] = {
    AppErrorCode.E_INVALID_REQUEST: ErrorSpec(HttpStatusCode.BAD_REQUEST, "invalid request"),
    AppErrorCode.E_INVALID_PARAMS: ErrorSpec(
        HttpStatusCode.UNPROCESSABLE_ENTITY, "invalid args in request"
    ),
    AppErrorCode.E_INVALID_PHONE_NUMBER: ErrorSpec(
        HttpStatusCode.BAD_REQUEST, "invalid phone number"
    ),
    AppErrorCode.E_INVALID_CODE: ErrorSpec(HttpStatusCode.BAD_REQUEST, "wrong sms code"),
    AppErrorCode.E_INVALID_ROOM_NAME: ErrorSpec(HttpStatusCode.BAD_REQUEST, "invalid room name"),
    AppErrorCode.E_BAD_LOGIN_TYPE: ErrorSpec(HttpStatusCode.BAD_REQUEST, "login type not supported"),
    AppErrorCode.E_TOKEN_INVALID: ErrorSpec(HttpStatusCode.UNAUTHORIZED, "token invalid"),
    AppErrorCode.E_ALREADY_LOGGED_IN: ErrorSpec(HttpStatusCode.UNAUTHORIZED, "user already logged in"),
    AppErrorCode.E_NOT_LOGGED_IN: ErrorSpec(HttpStatusCode.UNAUTHORIZED, "user not logged in"),
    AppErrorCode.E_NO_PERMISSION: ErrorSpec(HttpStatusCode.FORBIDDEN, "no permission"),
    AppErrorCode.E_NO_SUCH_USER: ErrorSpec(HttpStatusCode.NOT_FOUND, "no such user"),
    AppErrorCode.E_ROOM_NO_EXIST: ErrorSpec(HttpStatusCode.NOT_FOUND, "room no exist"),
    AppErrorCode.E_ROOM_NAME_USED: ErrorSpec(HttpStatusCode.CONFLICT, "room name used"),
    AppErrorCode.E_ROOM_IN_PK: ErrorSpec(HttpStatusCode.CONFLICT, "room in PK"),
    AppErrorCode.E_ROOM_NOT_IN_PK: ErrorSpec(HttpStatusCode.CONFLICT, "room not in PK"),
    AppErrorCode.E_SMS_TOO_FREQUENT: ErrorSpec(
        HttpStatusCode.TOO_MANY_REQUESTS, "sms code sent too frequently"
    ),
    AppErrorCode.E_TOO_MANY_ROOMS: ErrorSpec(HttpStatusCode.SERVICE_UNAVAILABLE, "too many rooms"),
    AppErrorCode.E_SMS_SEND_FAILED: ErrorSpec(HttpStatusCode.BAD_GATEWAY, "failed to send sms code"),
    AppErrorCode.E_GENERATION_EXHAUSTED: ErrorSpec(
        HttpStatusCode.INTERNAL_SERVER_ERROR, "internal server error"
    ),
    AppErrorCode.E_INTERNAL_ERROR: ErrorSpec(
        HttpStatusCode.INTERNAL_SERVER_ERROR, "internal server error"
    ),
}

INTERNAL_ERROR_SPEC = ERROR_TABLE[AppErrorCode.E_INTERNAL_ERROR]


class AppError(Exception):
    """Domain error raised by the services.

    Args:
        errcode: One of ``AppErrorCode``.
        errmesg: Detail for logs. The API returns the table message instead.
    """

    def __init__(self, errcode: AppErrorCode | str, errmesg: str | None = None):
        self.errcode = AppErrorCode(errcode)
        self.errmesg = errmesg or ERROR_TABLE[self.errcode].message
        self.erresid = uuid4().hex[:10]

        frame = inspect.currentframe()
        caller = frame.f_back if frame else None
        if caller is not None:
            module_name = caller.f_globals.get("__name__", caller.f_code.co_filename)
            self.caller_info = f"{module_name}:{caller.f_code.co_name}:{caller.f_lineno}"
        else:
            self.caller_info = "unknown"

        super().__init__(f"{self.errcode.value}: {self.errmesg}")

    @property
    def status_code(self) -> HttpStatusCode:
        return ERROR_TABLE[self.errcode].status_code

    @property
    def public_message(self) -> str:
        return ERROR_TABLE[self.errcode].message

    @property
    def is_internal(self) -> bool:
        return self.status_code >= HttpStatusCode.INTERNAL_SERVER_ERROR


class ResolvedError(NamedTuple):
    status_code: HttpStatusCode
    errcode: AppErrorCode
    errmesg: str


def resolve_error(exc: BaseException) -> ResolvedError:
    """Map any exception to the transport-facing status, code and message."""
    if isinstance(exc, AppError):
        spec = ERROR_TABLE[exc.errcode]
        return ResolvedError(spec.status_code, exc.errcode, spec.message)

    return ResolvedError(
        INTERNAL_ERROR_SPEC.status_code,
        AppErrorCode.E_INTERNAL_ERROR,
        INTERNAL_ERROR_SPEC.message,
    )


__all__ = [
    "ERROR_TABLE",
    "AppError",
    "AppErrorCode",
    "ErrorSpec",
    "HttpStatusCode",
    "ResolvedError",
    "resolve_error",
]
