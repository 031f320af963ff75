"""
Error responses and the exception handlers that produce them.
"""

import traceback
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contactbook.shared.context import get_context
from contactbook.shared.exceptions import (
    CSRFError,
    FormDecodeError,
    NotFoundError,
    PersistenceError,
)
from contactbook.shared.flash import pop_flash
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)


def client_error(status_code: int, headers: dict[str, str] | None = None) -> PlainTextResponse:
    """Plain-text response carrying the standard reason phrase."""
    return PlainTextResponse(HTTPStatus(status_code).phrase, status_code=status_code, headers=headers)


def not_found() -> PlainTextResponse:
    return client_error(404)


def server_error(request: Request, exc: BaseException) -> PlainTextResponse:
    """Log ``exc`` and answer with a 500.

    The trace is only sent to the client when the app runs with ``debug``.
    """
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        str(exc) or type(exc).__name__,
        extra={
            "method": request.method,
            "uri": request.url.path,
            "trace": trace,
        },
    )

    if get_context(request).settings.debug:
        return PlainTextResponse(trace, status_code=500)
    return client_error(500)


def install_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to HTTP responses."""

    @app.exception_handler(NotFoundError)
    async def _not_found(_: Request, exc: NotFoundError) -> PlainTextResponse:
        return not_found()

    @app.exception_handler(FormDecodeError)
    async def _bad_form(request: Request, exc: FormDecodeError) -> PlainTextResponse:
        logger.info("Rejected malformed form", extra={"uri": request.url.path, "error": str(exc)})
        return client_error(400)

    @app.exception_handler(CSRFError)
    async def _csrf(_: Request, exc: CSRFError) -> PlainTextResponse:
        return client_error(400)

    @app.exception_handler(PersistenceError)
    async def _persistence(request: Request, exc: PersistenceError) -> PlainTextResponse:
        # Drop any flash queued before the save failed.
        pop_flash(request)
        return server_error(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http(_: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        return client_error(exc.status_code, headers=exc.headers)
