"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

Two families sit on top of it:

- client rejections (CaptchaRequiredError, InvalidCaptchaError) are routine
  outcomes answered directly with 400/422;
- VerificationError and its subclasses are defects on the verifier side of
  the exchange. They keep the underlying exception as ``__cause__`` and carry
  the verifier's response (when there is one) for the server log.

Non-AppError exceptions bubble up as 500s (with Sentry reporting in production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class CaptchaRequiredError(ValidationError):
    error_code = "captcha_required"


class InvalidCaptchaError(AppError):
    status_code = 422
    error_code = "invalid_captcha"


class VerificationError(AppError):
    """The verification exchange itself went wrong.

    ``summary`` names the failing stage. When ``cause`` is given its text is
    appended to the message ("summary: cause"); callers should also raise
    with ``from cause`` so the chain stays inspectable.

    ``response`` (status and raw body, or the parsed reply) is kept for the
    server log only; it is never part of the client-facing payload.
    """

    status_code = 502
    error_code = "verification_error"

    def __init__(
        self,
        summary: str,
        *,
        cause: Optional[BaseException] = None,
        response: Optional[Any] = None,
    ) -> None:
        message = f"{summary}: {cause}" if cause is not None else summary
        super().__init__(message)
        self.summary = summary
        self.cause = cause
        self.response = response


class VerificationRequestError(VerificationError):
    error_code = "verification_request_failed"


class VerificationStatusError(VerificationError):
    error_code = "verification_bad_status"


class VerificationParseError(VerificationError):
    error_code = "verification_unparsable"


class BadVerificationRequestError(VerificationError):
    error_code = "bad_verification_request"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if isinstance(exc, VerificationError):
            log.error(
                "verification_error",
                path=request.url.path,
                error=exc.message,
                error_type=type(exc).__name__,
                verifier_reply=exc.response,
                exc_info=exc,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
