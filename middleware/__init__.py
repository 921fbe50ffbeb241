"""
Request-processing stages that run ahead of route handlers.

Stages are exposed as FastAPI dependencies so they can be attached per route
or per router with ``dependencies=[Depends(...)]``.
"""

from middleware.recaptcha import RecaptchaGate, extract_token, recaptcha_required

__all__ = ["RecaptchaGate", "extract_token", "recaptcha_required"]
