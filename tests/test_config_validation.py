"""Tests for configuration parsing and production start-up validation"""

import pytest

from config.base import _coerce_bool, _coerce_int
from config.validation import validate_and_exit, validate_environment

VALID_PRODUCTION = {
    "SECRET_KEY": "3f2a9c0d8e7b6a5f4e3d2c1b0a998877",
    "DATABASE_URL": "postgresql://hub:secret@db/hub",
}


class TestCoercion:
    @pytest.mark.parametrize("raw, expected", [("1", True), ("Yes", True), (" on ", True), ("0", False), ("off", False)])
    def test_bool(self, raw, expected):
        assert _coerce_bool(raw) is expected

    def test_bool_default(self):
        assert _coerce_bool(None, default=True) is True
        assert _coerce_bool("maybe", default=True) is True

    def test_int(self):
        assert _coerce_int("12", 5) == 12
        assert _coerce_int("abc", 5) == 5
        assert _coerce_int(None, 5) == 5
        assert _coerce_int("0", 5) == 5
        assert _coerce_int("70000", 587, maximum=65535) == 587


class TestValidateEnvironment:
    def test_non_production_is_not_validated(self):
        assert validate_environment("development", environ={}) == (True, [])
        assert validate_environment("testing", environ={}) == (True, [])

    def test_flask_env_read_from_environ(self):
        is_valid, errors = validate_environment(environ={"FLASK_ENV": "production"})
        assert is_valid is False
        assert len(errors) == 2

    def test_valid_production(self):
        assert validate_environment("production", environ=dict(VALID_PRODUCTION)) == (True, [])

    def test_placeholder_secret_key(self):
        environ = dict(VALID_PRODUCTION, SECRET_KEY="dev-secret-key-change-in-production")
        is_valid, errors = validate_environment("production", environ=environ)
        assert is_valid is False
        assert errors == ["SECRET_KEY is required in production and must not be a placeholder value."]

    def test_email_alerts_need_mail_settings(self):
        environ = dict(VALID_PRODUCTION, ENABLE_EMAIL_ALERTS="true", MAIL_SERVER="smtp.example.com")
        _, errors = validate_environment("production", environ=environ)
        assert errors == [
            "MAIL_USERNAME is required when ENABLE_EMAIL_ALERTS=true",
            "MAIL_PASSWORD is required when ENABLE_EMAIL_ALERTS=true",
            "ADMIN_EMAILS is required when ENABLE_EMAIL_ALERTS=true",
        ]

    def test_disabled_flag_skips_requirements(self):
        environ = dict(VALID_PRODUCTION, ENABLE_SLACK_ALERTS="false")
        assert validate_environment("production", environ=environ) == (True, [])

    @pytest.mark.parametrize("raw", ["0", "-3", "soon"])
    def test_positive_int_settings(self, raw):
        environ = dict(VALID_PRODUCTION, CHAT_STREAM_KEEPALIVE_SECONDS=raw)
        _, errors = validate_environment("production", environ=environ)
        assert errors == [f"CHAT_STREAM_KEEPALIVE_SECONDS must be a positive integer (got {raw!r})"]


class TestValidateAndExit:
    def test_exits_on_failure(self, monkeypatch, capsys):
        monkeypatch.delenv("SECRET_KEY", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(SystemExit) as excinfo:
            validate_and_exit("production")

        assert excinfo.value.code == 1
        err = capsys.readouterr().err
        assert "ENVIRONMENT VALIDATION FAILED" in err
        assert "1. SECRET_KEY is required" in err

    def test_passes_outside_production(self):
        assert validate_and_exit("development") is None
