"""
Unit tests for application settings.
"""

import pytest
from pydantic import ValidationError

from pharmacy_delivery.config.settings import Settings
from pharmacy_delivery.core.container import policy_from_settings


@pytest.mark.unit
def test_defaults(monkeypatch):
    for name in (
        "ASSIGNMENT_TIMEOUT_SECONDS",
        "FORCE_CONFIRM_ENABLED",
        "CURRENCY",
        "DB_USER",
        "DB_PASSWORD",
        "DB_HOST",
        "DB_PORT",
        "DB_NAME",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.ASSIGNMENT_TIMEOUT_SECONDS == 180
    assert settings.FORCE_CONFIRM_ENABLED is True
    assert settings.FORCE_CONFIRM_GRACE_SECONDS == 600
    assert settings.CURRENCY == "XOF"
    assert settings.database_url == "postgresql+asyncpg://postgres@localhost:5432/pharmacy_delivery"


@pytest.mark.unit
def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ASSIGNMENT_TIMEOUT_SECONDS", "300")
    monkeypatch.setenv("FORCE_CONFIRM_ENABLED", "false")
    monkeypatch.setenv("CURRENCY", "xaf")

    settings = Settings(_env_file=None)
    policy = policy_from_settings(settings)

    assert policy.assignment_timeout_seconds == 300
    assert policy.assignment_timeout_minutes == 5
    assert policy.force_confirm_enabled is False
    assert policy.currency == "XAF"


@pytest.mark.unit
def test_password_is_url_quoted():
    settings = Settings(_env_file=None, DB_PASSWORD="p@ss:word")

    assert "p%40ss%3Aword@" in settings.database_url


@pytest.mark.unit
@pytest.mark.parametrize("field,value", [("ASSIGNMENT_TIMEOUT_SECONDS", 0), ("LOG_FORMAT", "xml"), ("CURRENCY", "EURO")])
def test_invalid_values(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})
