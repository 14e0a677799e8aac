from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

from qlive.shared.api.utils import ApiFailure, format_error, get_request_id, make_response
from qlive.utils.app_errors import AppError, resolve_error


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Render an AppError through the error table.

    The detail message stays in the log; the response carries the table
    message and the request correlation ID.
    """
    erresid = get_request_id(request) or exc.erresid

    log_msg = f"{exc.errcode} {erresid} msg={exc.errmesg} caller={exc.caller_info}"
    if exc.is_internal:
        logger.error(log_msg)
    else:
        logger.warning(log_msg)

    failure = ApiFailure(errcode=exc.errcode.value, errmesg=exc.public_message, erresid=erresid)
    return make_response(failure, status_code=exc.status_code)


def unhandled_error_response(request: Request, exc: BaseException, erresid: str) -> JSONResponse:
    """Generic 500 for anything that is not an AppError; the traceback is only logged."""
    logger.error(
        f"[{erresid}] Unhandled exception in {request.method} {request.url.path}\n{format_error(exc)}"
    )

    resolved = resolve_error(exc)
    failure = ApiFailure(errcode=resolved.errcode.value, errmesg=resolved.errmesg, erresid=erresid)
    return make_response(failure, status_code=resolved.status_code)
