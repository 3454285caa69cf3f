"""Unit tests for environment-driven validation settings."""

from __future__ import annotations

import pytest

from request_validator.core.config import get_validation_settings
from request_validator.validation.options import ValidationOptions


def test_settings_default_to_unset_options() -> None:
    settings = get_validation_settings()

    assert settings.default_options() == ValidationOptions()
    assert settings.log_failures is True


def test_settings_read_boolean_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REQUEST_VALIDATOR_ABORT_EARLY", "yes")
    monkeypatch.setenv("REQUEST_VALIDATOR_ALLOW_UNKNOWN", "TRUE")
    monkeypatch.setenv("REQUEST_VALIDATOR_CONVERT", "0")
    monkeypatch.setenv("REQUEST_VALIDATOR_LOG_FAILURES", "off")

    settings = get_validation_settings()

    assert settings.default_options() == ValidationOptions(abort_early=True, allow_unknown=True, convert=False)
    assert settings.safe_for_logging() == {
        "abort_early": True,
        "allow_unknown": True,
        "strip_unknown": None,
        "convert": False,
        "log_failures": False,
    }


def test_settings_reject_invalid_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REQUEST_VALIDATOR_STRIP_UNKNOWN", "sometimes")

    with pytest.raises(ValueError, match="REQUEST_VALIDATOR_STRIP_UNKNOWN"):
        get_validation_settings()


def test_settings_are_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_validation_settings()
    monkeypatch.setenv("REQUEST_VALIDATOR_ABORT_EARLY", "true")

    assert get_validation_settings() is first
