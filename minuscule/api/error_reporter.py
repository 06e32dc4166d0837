"""Error Reporter — one structured log record and one HTTP response per failure.

Invariants:
    - report() returns exactly one Response and logs exactly one record
    - Status: error.status (or HTTPException.status_code) if attached → 400 for ValidationError-kind errors → 500
    - Unclassified (500) errors never leak their message: body is "error"
    - Full trace logged only outside production
    - Misuse (no context / no error) raises ConfigurationError synchronously

Design Decisions:
    - Production flag passed at construction, not read from the environment per call
    - Plain-text body: message goes out verbatim, serialization left to Starlette
    - register_error_handlers routes WebError raised from plain FastAPI routes
      through the same reporter (one error shape for the whole app)
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException
from starlette.responses import PlainTextResponse, Response

from minuscule.api.request_context import RequestContext
from minuscule.core.errors import ConfigurationError, WebError, category_for_status

logger = logging.getLogger(__name__)

GENERIC_BODY = "error"


def is_validation_error(exc: BaseException) -> bool:
    """True for pydantic/FastAPI validation errors and any *ValidationError by name."""
    return (
        isinstance(exc, (ValidationError, RequestValidationError))
        or type(exc).__name__ == "ValidationError"
    )


def derive_status(exc: BaseException) -> tuple[int, bool]:
    """Return (status, classified). Unclassified errors map to 500."""
    if isinstance(exc, HTTPException):
        return exc.status_code, True
    status = getattr(exc, "status", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return status, True
    if is_validation_error(exc):
        return 400, True
    return 500, False


def error_message(exc: BaseException) -> str:
    if isinstance(exc, HTTPException):
        return exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    message = getattr(exc, "message", None)
    return message if isinstance(message, str) else str(exc)


class ErrorReporter:
    """Logs a failed request and builds its error response."""

    def __init__(self, *, production: bool, log: logging.Logger | None = None):
        self.production = production
        self.log = log or logger

    def report(self, ctx: RequestContext, exc: BaseException) -> Response:
        if ctx is None:
            raise ConfigurationError("report() requires the request context")
        if exc is None:
            raise ConfigurationError("report() requires the error")
        status, classified = derive_status(exc)
        message = error_message(exc)
        self.log.error(
            f"{ctx.method} {ctx.url} failed with {status}: {message}",
            extra={
                "url": ctx.url,
                "method": ctx.method,
                "client": ctx.client,
                "at": datetime.now(timezone.utc).isoformat(),
                "status": status,
                "category": category_for_status(status).value,
                "error_type": type(exc).__name__,
                "error_message": message,
            },
            exc_info=None if self.production else exc,
        )
        if classified:
            return PlainTextResponse(message, status_code=status)
        return PlainTextResponse(GENERIC_BODY, status_code=500)


def register_error_handlers(app: FastAPI, reporter: ErrorReporter) -> None:
    """Route WebError / RequestValidationError from plain FastAPI routes to `reporter`."""

    async def reporting_handler(request: Request, exc: Exception):
        return reporter.report(RequestContext(request), exc)

    app.add_exception_handler(WebError, reporting_handler)
    app.add_exception_handler(RequestValidationError, reporting_handler)
