"""Central error translator.

Every failure raised while handling a request ends up here and is
rendered as ``{status, message, errors?}``.  Operational errors keep their
message.  Anything else is logged with its traceback and, in production,
replaced by a generic message.
"""

import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from saintshub_api.core.errors import AppError, Conflict, ValidationFailed
from saintshub_api.core.validation import violations_from_errors

GENERIC_MESSAGE = "Something went very wrong!"

# FastAPI prefixes request-validation locations with where the value came from
_LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")


def _status_word(status_code: int) -> str:
    return "fail" if 400 <= status_code < 500 else "error"


def _envelope(status_code: int, message: str, errors: list[Any] | None = None, **extra: Any) -> JSONResponse:
    content: dict[str, Any] = {"status": _status_word(status_code), "message": message}
    if errors is not None:
        content["errors"] = errors
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is None or settings.is_production


def render_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Render an ``AppError`` as its envelope."""
    if exc.status_code >= 500:
        logger.opt(exception=exc).warning("{} {} failed: {}", request.method, request.url.path, exc.message)
    return _envelope(exc.status_code, exc.message, exc.errors)


def render_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render a non-operational error, hiding details in production."""
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    if _is_production(request):
        return _envelope(500, GENERIC_MESSAGE)
    return _envelope(
        500,
        str(exc) or GENERIC_MESSAGE,
        error=type(exc).__name__,
        stack="".join(traceback.format_exception(exc)),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if not exc.is_operational:
        return render_unexpected_error(request, exc)
    return render_app_error(request, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    violations = violations_from_errors(exc.errors(), strip=_LOCATION_PREFIXES)
    return render_app_error(request, ValidationFailed(violations))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.info("Integrity violation on {} {}: {}", request.method, request.url.path, exc.orig)
    return render_app_error(request, Conflict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        message = f"Can't find {request.url.path} on this server!"
    else:
        message = str(exc.detail)
    return _envelope(exc.status_code, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return render_unexpected_error(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the translator on the app."""
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
