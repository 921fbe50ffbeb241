"""
reCAPTCHA gate.

Sits in front of a route and decides, once per request, whether the request
proceeds:

1. ``request.state.recaptcha is False`` (set by an earlier stage) skips
   verification entirely.
2. The token is looked up by name in the headers, then the query string,
   then the parsed body. The first non-empty string wins.
3. No token: 400, the verifier is not called.
4. The verifier rejects the token as invalid: 422.
5. Verified: the outcome is stored on ``request.state.recaptcha`` and the
   request continues.

Failures of the verification exchange itself propagate as VerificationError
subclasses to the app's exception handlers.

Usage:
    from middleware.recaptcha import recaptcha_required

    @router.post("/signup", dependencies=[Depends(recaptcha_required())])
    async def signup(...): ...
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional, Union
from weakref import WeakKeyDictionary

from fastapi import Request
from starlette.exceptions import HTTPException

from config import RecaptchaOptions
from errors import CaptchaRequiredError, InvalidCaptchaError
from infrastructure.captcha.protocol import CaptchaVerifier
from infrastructure.captcha.recaptcha import RecaptchaVerifier
from infrastructure.http_client import HttpClient
from schemas.models.verification import VerificationOutcome
from shared.ip_utils import get_client_ip
from shared.logging import get_logger

log = get_logger(__name__)

MISSING_TOKEN_MESSAGE = "Request has to include recaptcha response."
INVALID_TOKEN_MESSAGE = "Recaptcha response is invalid."

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

OptionsLike = Union[RecaptchaOptions, Mapping[str, Any]]


def _as_token(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


async def _read_body_field(request: Request, field: str) -> Optional[str]:
    # Media types are case-insensitive
    content_type = (
        request.headers.get("content-type", "").split(";")[0].strip().lower()
    )

    if content_type == "application/json" or content_type.endswith("+json"):
        try:
            body = await request.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            return _as_token(body.get(field))
        return None

    if content_type in _FORM_TYPES:
        try:
            form = await request.form()
        except HTTPException:
            # Starlette reports malformed multipart data this way
            return None
        return _as_token(form.get(field))

    return None


async def extract_token(request: Request, field: str) -> Optional[str]:
    """Find the token in header, query string, then body, in that order."""
    token = _as_token(request.headers.get(field))
    if token is not None:
        return token

    token = _as_token(request.query_params.get(field))
    if token is not None:
        return token

    return await _read_body_field(request, field)


class RecaptchaGate:
    """Per-request verification decision for one set of options."""

    def __init__(self, options: OptionsLike, verifier: CaptchaVerifier) -> None:
        self.options = _coerce_options(options)
        self._verifier = verifier

    @classmethod
    def from_http_client(
        cls, options: OptionsLike, http_client: HttpClient
    ) -> "RecaptchaGate":
        options = _coerce_options(options)
        return cls(options, RecaptchaVerifier(options, http_client))

    async def __call__(self, request: Request) -> Optional[VerificationOutcome]:
        if getattr(request.state, "recaptcha", None) is False:
            log.debug("recaptcha_bypassed", path=request.url.path)
            return None

        token = await extract_token(request, self.options.field)
        if token is None:
            log.info("recaptcha_missing", path=request.url.path)
            raise CaptchaRequiredError(MISSING_TOKEN_MESSAGE, field=self.options.field)

        outcome = await self._verifier.verify(token, get_client_ip(request))

        if outcome.is_invalid_token:
            raise InvalidCaptchaError(
                INVALID_TOKEN_MESSAGE,
                field=self.options.field,
                details={"error-codes": outcome.error_codes},
            )

        request.state.recaptcha = outcome
        return outcome


def _coerce_options(options: OptionsLike) -> RecaptchaOptions:
    if isinstance(options, RecaptchaOptions):
        return options
    return RecaptchaOptions.model_validate(dict(options))


def recaptcha_required(
    options: Optional[OptionsLike] = None,
    *,
    verifier: Optional[CaptchaVerifier] = None,
) -> Callable[[Request], Awaitable[Optional[VerificationOutcome]]]:
    """Build a FastAPI dependency that gates a route behind reCAPTCHA.

    Without ``options`` the app-wide gate built at startup from AppSettings
    (``app.state.recaptcha_gate``) is used. With ``options`` they are
    validated here, once; the gate uses ``verifier`` if given, otherwise it is
    built on first use from the app's shared ``HttpClient`` and reused for
    that app.
    """
    if verifier is not None and options is None:
        raise ValueError("a custom verifier needs explicit options")

    resolved = _coerce_options(options) if options is not None else None
    fixed_gate = (
        RecaptchaGate(resolved, verifier)
        if resolved is not None and verifier is not None
        else None
    )
    # Gates built from the app's HttpClient, one per app
    app_gates: WeakKeyDictionary = WeakKeyDictionary()

    async def dependency(request: Request) -> Optional[VerificationOutcome]:
        if fixed_gate is not None:
            gate = fixed_gate
        elif resolved is not None:
            gate = app_gates.get(request.app)
            if gate is None:
                gate = RecaptchaGate.from_http_client(
                    resolved, request.app.state.http_client
                )
                app_gates[request.app] = gate
        else:
            gate = request.app.state.recaptcha_gate
        return await gate(request)

    return dependency
