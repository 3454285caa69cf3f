"""Validation options and the layered merge used by every validator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
from typing import Any

_CAMEL_CASE_ALIASES: dict[str, str] = {
    "abortEarly": "abort_early",
    "allowUnknown": "allow_unknown",
    "stripUnknown": "strip_unknown",
}


@dataclass(frozen=True)
class ValidationOptions:
    """Switches forwarded to the schema engine.

    ``None`` means the switch is unset at this layer, so a merge keeps
    whatever an earlier layer chose (or the engine default if no layer did).
    """

    abort_early: bool | None = None
    allow_unknown: bool | None = None
    strip_unknown: bool | None = None
    convert: bool | None = None
    context: Mapping[str, Any] | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ValidationOptions:
        """Build options from a plain mapping, accepting camelCase switch names."""
        known = {item.name for item in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in raw.items():
            name = _CAMEL_CASE_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown validation option `{key}`")
            values[name] = value
        return cls(**values)

    def explicit(self) -> dict[str, Any]:
        """Return only the switches set at this layer."""
        return {item.name: getattr(self, item.name) for item in fields(self) if getattr(self, item.name) is not None}


BASELINE_OPTIONS = ValidationOptions(abort_early=False)

OptionsLike = ValidationOptions | Mapping[str, Any] | None


def coerce_options(options: OptionsLike) -> ValidationOptions | None:
    """Normalize caller-supplied options into ``ValidationOptions``."""
    if options is None or isinstance(options, ValidationOptions):
        return options
    if isinstance(options, Mapping):
        return ValidationOptions.from_mapping(options)
    raise TypeError(f"Validation options must be ValidationOptions or a mapping, got {type(options).__name__}")


def merge_options(base: ValidationOptions, *overrides: OptionsLike) -> ValidationOptions:
    """Layer overrides onto ``base``; later layers win for every switch they set."""
    merged = base
    for override in overrides:
        layer = coerce_options(override)
        if layer is None:
            continue
        merged = replace(merged, **layer.explicit())
    return merged
