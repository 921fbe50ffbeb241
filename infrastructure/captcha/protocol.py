"""CaptchaVerifier protocol: the gate depends on this, not the concrete implementation."""

from typing import Optional, Protocol

from schemas.models.verification import VerificationOutcome


class CaptchaVerifier(Protocol):
    async def verify(
        self, token: str, remote_ip: Optional[str] = None
    ) -> VerificationOutcome: ...
