"""Numeric error codes for the real-time (websocket) channel."""

from enum import IntEnum

from .app_errors import AppErrorCode


class WSErrorCode(IntEnum):
    OK = 0
    UNKNOWN_MESSAGE = 10001
    TOKEN_INVALID = 10002
    NO_PERMISSION = 10003
    ROOM_NO_EXIST = 10011
    ROOM_IN_PK = 10012
    ROOM_NOT_IN_PK = 10013


WS_ERROR_DESCRIPTIONS: dict[WSErrorCode, str] = {
    WSErrorCode.OK: "",
    WSErrorCode.UNKNOWN_MESSAGE: "unknown message",
    WSErrorCode.TOKEN_INVALID: "token invalid",
    WSErrorCode.NO_PERMISSION: "no permission",
    WSErrorCode.ROOM_NO_EXIST: "room no exist",
    WSErrorCode.ROOM_IN_PK: "room in PK",
    WSErrorCode.ROOM_NOT_IN_PK: "room not in PK",
}

_APP_TO_WS: dict[AppErrorCode, WSErrorCode] = {
    AppErrorCode.E_TOKEN_INVALID: WSErrorCode.TOKEN_INVALID,
    AppErrorCode.E_NO_PERMISSION: WSErrorCode.NO_PERMISSION,
    AppErrorCode.E_ROOM_NO_EXIST: WSErrorCode.ROOM_NO_EXIST,
    AppErrorCode.E_ROOM_IN_PK: WSErrorCode.ROOM_IN_PK,
    AppErrorCode.E_ROOM_NOT_IN_PK: WSErrorCode.ROOM_NOT_IN_PK,
}


def describe_ws_error(code: WSErrorCode | int) -> str:
    """Return the fixed description for a channel error code.

    Raises:
        ValueError: If the code is not part of the table.
    """
    return WS_ERROR_DESCRIPTIONS[WSErrorCode(code)]


def ws_error_for(errcode: AppErrorCode) -> WSErrorCode | None:
    """Channel code for an application error, or None when the channel has no equivalent."""
    return _APP_TO_WS.get(errcode)
