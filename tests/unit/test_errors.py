"""Unit tests for the AppError hierarchy and exception handlers."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import (
    AppError,
    BadVerificationRequestError,
    CaptchaRequiredError,
    InvalidCaptchaError,
    ValidationError,
    VerificationError,
    VerificationParseError,
    VerificationRequestError,
    VerificationStatusError,
    register_error_handlers,
)


class TestAppErrorSubclasses:
    def test_validation_error(self):
        e = ValidationError("bad input")
        assert e.status_code == 400
        assert e.error_code == "validation_error"
        assert e.message == "bad input"

    def test_captcha_required_is_a_validation_error(self):
        e = CaptchaRequiredError("missing", field="g-recaptcha-response")
        assert isinstance(e, ValidationError)
        assert e.status_code == 400
        assert e.error_code == "captcha_required"

    def test_invalid_captcha(self):
        e = InvalidCaptchaError("nope")
        assert e.status_code == 422
        assert e.error_code == "invalid_captcha"

    @pytest.mark.parametrize(
        "cls, code",
        [
            (VerificationRequestError, "verification_request_failed"),
            (VerificationStatusError, "verification_bad_status"),
            (VerificationParseError, "verification_unparsable"),
            (BadVerificationRequestError, "bad_verification_request"),
        ],
    )
    def test_verification_errors(self, cls, code):
        e = cls("boom")
        assert isinstance(e, VerificationError)
        assert e.status_code == 502
        assert e.error_code == code


class TestVerificationError:
    def test_message_without_cause(self):
        e = VerificationError("bad verification request")
        assert e.message == "bad verification request"
        assert e.cause is None
        assert e.response is None

    def test_message_includes_cause(self):
        cause = ConnectionError("connection reset")
        e = VerificationRequestError("verification request failed", cause=cause)
        assert e.message == "verification request failed: connection reset"
        assert e.summary == "verification request failed"
        assert e.cause is cause

    def test_raise_from_keeps_chain(self):
        cause = ValueError("Expecting value")
        with pytest.raises(VerificationParseError) as exc_info:
            try:
                raise cause
            except ValueError as e:
                raise VerificationParseError("parsing failed", cause=e) from e
        assert exc_info.value.__cause__ is cause

    def test_response_kept_off_client_payload(self):
        body = {"status_code": 500, "body": "X"}
        e = VerificationStatusError("verification request returned status 500", response=body)
        assert e.response == body
        assert e.to_dict() == {
            "error": "verification request returned status 500",
            "code": "verification_bad_status",
        }


class TestAppErrorToDict:
    def test_basic(self):
        e = InvalidCaptchaError("Recaptcha response is invalid.")
        assert e.to_dict() == {
            "error": "Recaptcha response is invalid.",
            "code": "invalid_captcha",
        }

    @pytest.mark.parametrize(
        "kwargs, key, value",
        [
            ({"field": "g-recaptcha-response"}, "field", "g-recaptcha-response"),
            ({"details": {"error-codes": ["x"]}}, "details", {"error-codes": ["x"]}),
        ],
        ids=["with_field", "with_details"],
    )
    def test_optional_key_present(self, kwargs, key, value):
        e = ValidationError("invalid", **kwargs)
        assert e.to_dict()[key] == value

    def test_no_optional_keys_when_absent(self):
        d = AppError("missing").to_dict()
        assert "field" not in d
        assert "details" not in d


class TestHandlers:
    def _client(self, exc: Exception) -> TestClient:
        app = FastAPI()
        register_error_handlers(app)

        @app.get("/boom")
        async def boom():
            raise exc

        return TestClient(app, raise_server_exceptions=False)

    def test_app_error_rendered_with_status(self):
        resp = self._client(InvalidCaptchaError("invalid")).get("/boom")
        assert resp.status_code == 422
        assert resp.json() == {"error": "invalid", "code": "invalid_captcha"}

    def test_verification_error_reply_only_logged(self, mocker):
        reply = {"success": False, "error-codes": ["missing-input-secret"]}
        exc = BadVerificationRequestError("bad verification request", response=reply)
        fake_log = mocker.patch("errors.log")
        resp = self._client(exc).get("/boom")
        assert resp.status_code == 502
        assert resp.json() == {
            "error": "bad verification request",
            "code": "bad_verification_request",
        }
        fake_log.error.assert_called_once()
        assert fake_log.error.call_args.kwargs["verifier_reply"] == reply

    def test_unhandled_exception_is_generic_500(self):
        resp = self._client(RuntimeError("secret detail")).get("/boom")
        assert resp.status_code == 500
        assert resp.json()["code"] == "internal_error"
        assert "secret detail" not in resp.text
