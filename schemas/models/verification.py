"""
Verification outcome: the parsed body of a siteverify response.

The gate attaches an instance to ``request.state.recaptcha`` once the
verifier has accepted the token. Keys the model does not declare are kept,
so ``to_dict()`` gives back the body as the verifier sent it.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Error code the verifier uses when the submitted token itself is bad
# (wrong, expired or already used).
INVALID_INPUT_RESPONSE = "invalid-input-response"


class VerificationOutcome(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    success: bool
    error_codes: list[str] = Field(default_factory=list, alias="error-codes")

    # Optional fields documented by the verifier (score/action are v3 only)
    challenge_ts: Optional[str] = None
    hostname: Optional[str] = None
    apk_package_name: Optional[str] = None
    score: Optional[float] = None
    action: Optional[str] = None

    def has_error(self, code: str) -> bool:
        return code in self.error_codes

    @property
    def is_invalid_token(self) -> bool:
        """Failed because the client's token was rejected."""
        return not self.success and self.has_error(INVALID_INPUT_RESPONSE)

    @property
    def is_bad_request(self) -> bool:
        """Failed for any other reason: secret missing or wrong, malformed call."""
        return not self.success and not self.has_error(INVALID_INPUT_RESPONSE)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)
