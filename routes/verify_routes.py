"""
POST /verify: a route behind the app-wide reCAPTCHA gate.

Returns the verifier's outcome so clients (and smoke tests) can check a token
end to end.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from dependencies import get_verification_outcome
from middleware.recaptcha import recaptcha_required
from schemas.models.verification import VerificationOutcome

router = APIRouter(tags=["recaptcha"])


@router.post("/verify", dependencies=[Depends(recaptcha_required())])
async def verify(
    outcome: Optional[VerificationOutcome] = Depends(get_verification_outcome),
) -> dict:
    if outcome is None:
        return {"verified": False, "skipped": True}
    return {"verified": True, "outcome": outcome.to_dict()}
