"""Process-level configuration for request validation."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

from request_validator.validation.options import ValidationOptions

DEFAULT_LOG_FAILURES = True

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_optional_bool_env(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _get_bool_env(name: str, default: bool) -> bool:
    value = _get_optional_bool_env(name)
    return default if value is None else value


@dataclass(frozen=True)
class ValidationSettings:
    """Process-wide defaults layered over the built-in baseline options."""

    abort_early: bool | None
    allow_unknown: bool | None
    strip_unknown: bool | None
    convert: bool | None
    log_failures: bool

    def default_options(self) -> ValidationOptions:
        """Return the option layer contributed by the environment."""
        return ValidationOptions(
            abort_early=self.abort_early,
            allow_unknown=self.allow_unknown,
            strip_unknown=self.strip_unknown,
            convert=self.convert,
        )

    def safe_for_logging(self) -> dict[str, bool | None]:
        """Return settings as a flat dict for log lines."""
        return {
            "abort_early": self.abort_early,
            "allow_unknown": self.allow_unknown,
            "strip_unknown": self.strip_unknown,
            "convert": self.convert,
            "log_failures": self.log_failures,
        }


@lru_cache(maxsize=1)
def get_validation_settings() -> ValidationSettings:
    """Load validation settings from the environment."""
    return ValidationSettings(
        abort_early=_get_optional_bool_env("REQUEST_VALIDATOR_ABORT_EARLY"),
        allow_unknown=_get_optional_bool_env("REQUEST_VALIDATOR_ALLOW_UNKNOWN"),
        strip_unknown=_get_optional_bool_env("REQUEST_VALIDATOR_STRIP_UNKNOWN"),
        convert=_get_optional_bool_env("REQUEST_VALIDATOR_CONVERT"),
        log_failures=_get_bool_env("REQUEST_VALIDATOR_LOG_FAILURES", DEFAULT_LOG_FAILURES),
    )
