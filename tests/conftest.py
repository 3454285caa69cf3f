"""Shared pytest fixtures for request validator test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

_SETTINGS_ENV_VARS = (
    "REQUEST_VALIDATOR_ABORT_EARLY",
    "REQUEST_VALIDATOR_ALLOW_UNKNOWN",
    "REQUEST_VALIDATOR_STRIP_UNKNOWN",
    "REQUEST_VALIDATOR_CONVERT",
    "REQUEST_VALIDATOR_LOG_FAILURES",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Start every test from unset environment settings and a cold settings cache."""
    from request_validator.core.config import get_validation_settings

    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_validation_settings.cache_clear()
    yield
    get_validation_settings.cache_clear()
