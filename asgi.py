"""
ASGI entry point.

Run with:
    uvicorn asgi:app --reload

RECAPTCHA_SECRET must be set (use "test_secret" for local development).
"""

from app import create_app

app = create_app()
