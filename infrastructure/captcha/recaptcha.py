"""Google reCAPTCHA implementation of CaptchaVerifier.

verify() performs exactly one GET against the siteverify endpoint and
classifies the reply, first match wins:

- the call itself fails          -> VerificationRequestError
- status is not 200              -> VerificationStatusError (status + raw body)
- body is not a verdict          -> VerificationParseError
- failure without the bad-token
  code (secret missing/invalid)  -> BadVerificationRequestError (parsed body)
- failure with the bad-token code -> outcome returned, caller rejects with 422
- success                        -> outcome returned
"""

from __future__ import annotations

from typing import Optional

import httpx

from config import RecaptchaOptions
from errors import (
    BadVerificationRequestError,
    VerificationParseError,
    VerificationRequestError,
    VerificationStatusError,
)
from infrastructure.http_client import HttpClient
from schemas.models.verification import VerificationOutcome
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)


class RecaptchaVerifier:
    def __init__(self, options: RecaptchaOptions, http_client: HttpClient) -> None:
        self._options = options
        self._http = http_client

    def build_verify_url(self, token: str, remote_ip: Optional[str] = None) -> str:
        params = {
            "secret": self._options.secret,
            "response": token,
            "remoteip": remote_ip or "",
        }
        return str(httpx.URL(self._options.verify_url, params=params))

    async def verify(
        self, token: str, remote_ip: Optional[str] = None
    ) -> VerificationOutcome:
        url = self.build_verify_url(token, remote_ip)

        try:
            response = await self._http.get(url, timeout=self._options.timeout_seconds)
        except Exception as e:
            log.error(
                "recaptcha_request_failed",
                error=str(e),
                error_type=type(e).__name__,
                ip_hash=hash_ip(remote_ip),
            )
            raise VerificationRequestError(
                "verification request failed", cause=e
            ) from e

        if response.status_code != 200:
            log.error(
                "recaptcha_bad_status",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise VerificationStatusError(
                f"verification request returned status {response.status_code}",
                response={"status_code": response.status_code, "body": response.text},
            )

        try:
            outcome = VerificationOutcome.model_validate(response.json())
        except ValueError as e:
            log.error(
                "recaptcha_unparsable_body",
                error_type=type(e).__name__,
                response_text=response.text[:200],
            )
            raise VerificationParseError(
                "parsing body of verification response failed", cause=e
            ) from e

        if outcome.is_bad_request:
            log.error("recaptcha_bad_request", error_codes=outcome.error_codes)
            raise BadVerificationRequestError(
                "bad verification request", response=outcome.to_dict()
            )

        if outcome.is_invalid_token:
            log.info(
                "recaptcha_invalid_token",
                error_codes=outcome.error_codes,
                ip_hash=hash_ip(remote_ip),
            )
            return outcome

        log.debug(
            "recaptcha_verified",
            hostname=outcome.hostname,
            score=outcome.score,
            ip_hash=hash_ip(remote_ip),
        )
        return outcome
