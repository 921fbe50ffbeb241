"""
Unit test configuration.

Keeps pydantic-settings away from the real environment: no .env file is read
and RECAPTCHA_* variables from the developer's shell are cleared. Tests
control config exclusively through monkeypatch.setenv().
"""

import pytest


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})
    for var in ("RECAPTCHA_SECRET", "RECAPTCHA_FIELD", "RECAPTCHA_TIMEOUT_SECONDS"):
        monkeypatch.delenv(var, raising=False)
