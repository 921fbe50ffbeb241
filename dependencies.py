"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. The reCAPTCHA gate itself lives in
middleware.recaptcha.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from config import AppSettings
from infrastructure.http_client import HttpClient
from schemas.models.verification import VerificationOutcome


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_http_client(request: Request) -> HttpClient:
    """Return the shared outbound HttpClient from app.state."""
    return request.app.state.http_client


def get_verification_outcome(request: Request) -> Optional[VerificationOutcome]:
    """Return the outcome the gate attached, or None if verification was skipped."""
    outcome = getattr(request.state, "recaptcha", None)
    if isinstance(outcome, VerificationOutcome):
        return outcome
    return None
