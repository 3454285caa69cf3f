"""Schema engine capability and its pydantic implementation."""

from __future__ import annotations

from copy import copy
from dataclasses import dataclass
from dataclasses import field
import types
from typing import Any
from typing import Literal
from typing import Protocol
from typing import Union
from typing import runtime_checkable

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import RootModel
from pydantic import TypeAdapter
from pydantic import ValidationError
from pydantic import with_config
from typing_extensions import Annotated
from typing_extensions import NotRequired
from typing_extensions import Required
from typing_extensions import TypedDict
from typing_extensions import get_args
from typing_extensions import get_origin
from typing_extensions import get_type_hints
from typing_extensions import is_typeddict

from request_validator.schemas.error import ErrorDetail
from request_validator.validation.options import ValidationOptions

ExtraBehavior = Literal["allow", "ignore", "forbid"]

EXTRA_BEHAVIORS: tuple[ExtraBehavior, ...] = ("allow", "ignore", "forbid")


@dataclass(frozen=True)
class ValidationOutcome:
    """Verdict of one schema evaluation."""

    value: Any = None
    issues: list[ErrorDetail] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


@runtime_checkable
class Schema(Protocol):
    """Anything able to judge a value under a set of validation options."""

    def evaluate(self, value: Any, options: ValidationOptions) -> ValidationOutcome: ...


class PydanticSchema:
    """Evaluate request sections with a pydantic model or ``TypeAdapter``.

    Undeclared-field handling is a config setting in pydantic, so one adapter
    per mode is built up front. Each adapter carries the mode into every
    nested model and TypedDict reachable from the schema's annotations.
    Self-referencing models keep their own config below the first level.
    """

    def __init__(self, target: type[BaseModel] | TypeAdapter[Any]) -> None:
        if isinstance(target, TypeAdapter):
            annotation = target._type
            original: TypeAdapter[Any] | None = target
        elif isinstance(target, type) and issubclass(target, BaseModel):
            annotation = target
            original = None
        else:
            raise TypeError(f"PydanticSchema expects a BaseModel subclass or TypeAdapter, got {target!r}")
        self._annotation = annotation
        self._adapters = {extra: _build_adapter(annotation, extra, original) for extra in EXTRA_BEHAVIORS}

    def __repr__(self) -> str:
        return f"PydanticSchema({getattr(self._annotation, '__name__', self._annotation)!r})"

    def evaluate(self, value: Any, options: ValidationOptions) -> ValidationOutcome:
        strict = None if options.convert is None else not options.convert
        context = dict(options.context) if options.context is not None else None
        adapter = self._adapters[_extra_behavior(options)]
        try:
            validated = adapter.validate_python(value, strict=strict, context=context)
        except ValidationError as exc:
            issues = issues_from_validation_error(exc)
            if options.abort_early:
                issues = issues[:1]
            return ValidationOutcome(issues=issues)
        return ValidationOutcome(value=validated)


def as_schema(target: Any) -> Schema:
    """Resolve a route-supplied schema into the ``Schema`` capability."""
    if isinstance(target, TypeAdapter) or (isinstance(target, type) and issubclass(target, BaseModel)):
        return PydanticSchema(target)
    if isinstance(target, Schema):
        return target
    raise TypeError(f"Unsupported schema {target!r}; expected a BaseModel subclass, TypeAdapter or Schema")


def issues_from_validation_error(exc: ValidationError) -> list[ErrorDetail]:
    """Flatten pydantic errors into ordered violation records."""
    return [
        ErrorDetail(
            field=format_location(error.get("loc", ())),
            issue=str(error.get("msg", "Invalid value")),
            type=error.get("type"),
        )
        for error in exc.errors()
    ]


def format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)
    if not location:
        return "request"
    return ".".join(str(part) for part in location)


def _extra_behavior(options: ValidationOptions) -> ExtraBehavior:
    if options.allow_unknown:
        return "allow"
    if options.strip_unknown:
        return "ignore"
    return "forbid"


def _build_adapter(annotation: Any, extra: ExtraBehavior, original: TypeAdapter[Any] | None) -> TypeAdapter[Any]:
    rewritten = _with_extra(annotation, extra, frozenset())
    if rewritten is annotation and original is not None:
        return original
    return TypeAdapter(rewritten)


def _with_extra(annotation: Any, extra: ExtraBehavior, seen: frozenset[Any]) -> Any:
    """Return ``annotation`` with every reachable model and TypedDict set to ``extra``."""
    origin = get_origin(annotation)
    if origin is None:
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            return annotation if annotation in seen else _model_with_extra(annotation, extra, seen)
        if is_typeddict(annotation):
            return annotation if annotation in seen else _typed_dict_with_extra(annotation, extra, seen)
        return annotation

    args = get_args(annotation)
    if origin is Literal or not args:
        return annotation
    if origin is Annotated:
        inner = _with_extra(args[0], extra, seen)
        return annotation if inner is args[0] else Annotated[(inner, *annotation.__metadata__)]

    rewritten = tuple(_with_extra(arg, extra, seen) for arg in args)
    if all(new is old for new, old in zip(rewritten, args)):
        return annotation
    if origin is Union or origin is types.UnionType:
        return Union[rewritten]
    if isinstance(annotation, types.GenericAlias):
        return types.GenericAlias(origin, rewritten)
    return annotation.copy_with(rewritten)


def _model_with_extra(model: type[BaseModel], extra: ExtraBehavior, seen: frozenset[Any]) -> type[BaseModel]:
    seen = seen | {model}
    annotations: dict[str, Any] = {}
    namespace: dict[str, Any] = {
        "__module__": model.__module__,
        "__qualname__": model.__qualname__,
    }
    for name, info in model.model_fields.items():
        annotation = _with_extra(info.annotation, extra, seen)
        if annotation is not info.annotation:
            annotations[name] = annotation
            namespace[name] = copy(info)

    # RootModel rejects `extra`; only its root annotation is rewritten.
    if not issubclass(model, RootModel) and model.model_config.get("extra") != extra:
        namespace["model_config"] = ConfigDict(extra=extra)
    elif not annotations:
        return model
    namespace["__annotations__"] = annotations
    return type(model)(model.__name__, (model,), namespace)


def _typed_dict_with_extra(typed_dict: Any, extra: ExtraBehavior, seen: frozenset[Any]) -> Any:
    seen = seen | {typed_dict}
    required_keys = getattr(typed_dict, "__required_keys__", frozenset())
    fields: dict[str, Any] = {}
    for key, hint in get_type_hints(typed_dict, include_extras=True).items():
        wrapper = get_origin(hint)
        if wrapper is Required or wrapper is NotRequired:
            hint = get_args(hint)[0]
        else:
            wrapper = Required if key in required_keys else NotRequired
        fields[key] = wrapper[_with_extra(hint, extra, seen)]
    variant = TypedDict(typed_dict.__name__, fields)
    variant.__module__ = typed_dict.__module__
    return with_config(ConfigDict(extra=extra))(variant)
