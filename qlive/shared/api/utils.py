import sys
from functools import lru_cache
from os import environ
from pathlib import Path
from typing import Any, Literal
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from qlive.utils.app_errors import ERROR_TABLE, AppErrorCode


def format_error(ex: BaseException) -> str:
    from traceback import TracebackException
    return ''.join(TracebackException.from_exception(ex).format())


class ApiResponse(BaseModel):
    version: str | None = Field(default_factory=lambda: environ.get('BUILD_COMMIT', 'dev'))


class ApiSuccess(ApiResponse):
    success: Literal[True] = True
    results: Any = "OK"


class ApiFailure(ApiResponse):
    success: Literal[False] = False
    errcode: str = AppErrorCode.E_INTERNAL_ERROR.value
    erresid: str = Field(default_factory=lambda: uuid4().hex[:10])
    errmesg: str = ERROR_TABLE[AppErrorCode.E_INTERNAL_ERROR].message


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, 'request_id', None)


def make_response(results, *, status_code: int | None = None):
    if isinstance(results, ApiFailure):
        if status_code is None:
            status_code = 500 if results.errcode == AppErrorCode.E_INTERNAL_ERROR.value else 400
    elif status_code is None:
        status_code = 200

    return ORJSONResponse(
        status_code=status_code,
        content=results.model_dump() if hasattr(results, 'model_dump') else results
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()

    logger.warning(
        "Validation error: path={} method={} errors={}",
        request.url.path, request.method, errors
    )

    failure = ApiFailure(
        errcode=AppErrorCode.E_INVALID_PARAMS.value,
        errmesg=ERROR_TABLE[AppErrorCode.E_INVALID_PARAMS].message,
        erresid=get_request_id(request) or uuid4().hex[:10],
    )
    return make_response(failure, status_code=422)


def get_all_routes_info(app: FastAPI):
    routes_info = []

    for route in app.routes:
        if hasattr(route, 'methods'):
            endpoint_name = route.endpoint.__name__ if hasattr(route.endpoint, '__name__') else str(route.endpoint)
            routes_info.append(
                {
                    "methods": sorted(route.methods),
                    "path": route.path,
                    "name": route.name,
                    "endpoint": endpoint_name,
                }
            )

    return routes_info


def log_routes(app: FastAPI):
    for route_info in get_all_routes_info(app):
        methods = ','.join(route_info['methods'])
        logger.info('Loaded route: {:<12} {:<60} {}', methods, route_info['path'], route_info['endpoint'])


@lru_cache
def get_worker_info():
    project_root = Path(__file__).parent.parent.parent.parent
    worker_name = environ.get('WORKER_NAME', project_root.name)

    parts = environ.get('BUILD_COMMIT', '').split('-')
    commit_id = parts[1] if len(parts) > 1 else 'dev'

    return worker_name, commit_id, uuid4().hex[:8]


def init_logger():
    from ..config import config

    logger.remove()

    worker_name, commit_id, _ = get_worker_info()

    if config.is_true('DEBUG'):
        logger_level = 'DEBUG'
        logger_format = (
            f'<yellow>{worker_name}:{commit_id}</yellow> | '
            '<green>{time:MM-DD HH:mm:ss.SSS}</green> | '
            '<level>{level: <8}</level> | '
            '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
            '<level>{message}</level>'
        )
    else:
        logger_level = 'INFO'
        logger_format = (
            f'{worker_name}:{commit_id} | '
            '{time:MM-DD HH:mm:ss.SSS} | '
            '{level: <8} | '
            '{name}:{function}:{line} | '
            '{message}'
        )
    logger.add(sys.stderr, level=logger_level, format=logger_format)


def load_routes(app: FastAPI, prefix: str, package: str = 'qlive.api.v1.routers'):
    from importlib import import_module

    from ..config import config

    disabled_routes = [x.strip() for x in (config.get('API_DISABLED') or '').split(',') if x.strip()]
    folder = Path(next(iter(import_module(package).__path__)))

    for x in sorted(folder.glob('*.py')):
        if x.name == '__init__.py' or x.stem in disabled_routes:
            if x.stem in disabled_routes:
                logger.warning('disabled route {}', x.stem)
            continue

        module = import_module(f'{package}.{x.stem}')
        if hasattr(module, 'router'):
            app.include_router(module.router, prefix=prefix)
            logger.info('Added routes in {}', module.__name__)

    log_routes(app)
