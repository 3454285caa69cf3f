"""Section and aggregate request validators.

Each validator is built once per route from a schema (or a schema per
section) and is then usable three ways:

* ``check(sections)`` returns ``None`` or a ``RequestValidationMiddlewareError``;
* ``handle(sections, call_next)`` invokes the continuation exactly once, with
  the error as its only argument on failure;
* ``Depends(validator)`` runs it as a FastAPI dependency, raising the error
  into the registered exception handlers.

Options are layered in one order everywhere: baseline, process settings,
``RequestValidator`` defaults, factory options, call-time options.
"""

from collections.abc import Callable
from collections.abc import Mapping
import logging
from typing import Any
from typing import TypeVar

from starlette.requests import Request

from request_validator.core.config import get_validation_settings
from request_validator.core.errors import RequestValidationMiddlewareError
from request_validator.core.errors import translate_errors
from request_validator.validation.engine import Schema
from request_validator.validation.engine import ValidationOutcome
from request_validator.validation.engine import as_schema
from request_validator.validation.options import BASELINE_OPTIONS
from request_validator.validation.options import OptionsLike
from request_validator.validation.options import merge_options
from request_validator.validation.sections import RequestSections
from request_validator.validation.sections import Section
from request_validator.validation.sections import extract_sections
from request_validator.validation.sections import parse_section

logger = logging.getLogger(__name__)

T = TypeVar("T")

SECTION_ORDER: tuple[Section, ...] = tuple(Section)


class _RequestValidatorStep:
    """Shared evaluation and dispatch for section and aggregate validators."""

    def __init__(
        self,
        schemas: Mapping[Section, Schema],
        options: OptionsLike = None,
        *,
        log_failures: bool = True,
    ) -> None:
        self._schemas = dict(schemas)
        self.options = merge_options(BASELINE_OPTIONS, options)
        self.log_failures = log_failures

    @property
    def sections(self) -> tuple[Section, ...]:
        return tuple(section for section in SECTION_ORDER if section in self._schemas)

    def evaluate(
        self,
        sections: RequestSections,
        options: OptionsLike = None,
    ) -> dict[Section, ValidationOutcome]:
        """Run every mapped schema against its section; no short-circuit across sections."""
        effective = merge_options(self.options, options)
        return {
            section: self._schemas[section].evaluate(sections.get(section), effective)
            for section in self.sections
        }

    def check(
        self,
        sections: RequestSections,
        options: OptionsLike = None,
    ) -> RequestValidationMiddlewareError | None:
        """Return the classified error for failing sections, or ``None`` when all pass."""
        return self._to_error(self.evaluate(sections, options))

    def handle(
        self,
        sections: RequestSections,
        call_next: Callable[..., T],
        options: OptionsLike = None,
    ) -> T:
        """Continuation form: ``call_next()`` on success, ``call_next(error)`` on failure."""
        error = self.check(sections, options)
        if error is not None:
            return call_next(error)
        return call_next()

    async def _validate_request(self, request: Request) -> dict[Section, ValidationOutcome]:
        snapshot = await extract_sections(request, self.sections)
        outcomes = self.evaluate(snapshot)
        error = self._to_error(outcomes, path=request.url.path)
        if error is not None:
            raise error
        return outcomes

    def _to_error(
        self,
        outcomes: Mapping[Section, ValidationOutcome],
        *,
        path: str | None = None,
    ) -> RequestValidationMiddlewareError | None:
        failed = {section.value: outcome.issues for section, outcome in outcomes.items() if not outcome.ok}
        if not failed:
            return None
        if self.log_failures:
            logger.info(
                "Request validation failed path=%s sections=%s issues=%s",
                path,
                ",".join(failed),
                sum(len(issues) for issues in failed.values()),
            )
        return translate_errors(failed)


class SectionValidator(_RequestValidatorStep):
    """Validate one named section of the request."""

    def __init__(
        self,
        section: Section | str,
        schema: Any,
        options: OptionsLike = None,
        *,
        log_failures: bool = True,
    ) -> None:
        self.section = parse_section(section)
        super().__init__({self.section: as_schema(schema)}, options, log_failures=log_failures)

    def __repr__(self) -> str:
        return f"SectionValidator({self.section.value!r}, {self._schemas[self.section]!r})"

    # FastAPI inspects this signature at runtime; keep annotations unquoted.
    async def __call__(self, request: Request) -> Any:
        outcomes = await self._validate_request(request)
        return outcomes[self.section].value


class AggregateValidator(_RequestValidatorStep):
    """Validate every section mapped in a schema set in one exhaustive pass."""

    def __init__(
        self,
        schema_set: Mapping[Section | str, Any],
        options: OptionsLike = None,
        *,
        log_failures: bool = True,
    ) -> None:
        schemas: dict[Section, Schema] = {}
        for name, schema in schema_set.items():
            section = parse_section(name)
            if schema is not None:
                schemas[section] = as_schema(schema)
        super().__init__(schemas, options, log_failures=log_failures)

    def __repr__(self) -> str:
        mapped = ", ".join(section.value for section in self.sections)
        return f"AggregateValidator({mapped})"

    async def __call__(self, request: Request) -> dict[str, Any]:
        outcomes = await self._validate_request(request)
        return {section.value: outcome.value for section, outcome in outcomes.items()}


class RequestValidator:
    """Factory for validators sharing one set of default options."""

    def __init__(self, options: OptionsLike = None) -> None:
        settings = get_validation_settings()
        self.options = merge_options(BASELINE_OPTIONS, settings.default_options(), options)
        self.log_failures = settings.log_failures
        logger.debug(
            "Request validator defaults resolved options=%s settings=%s",
            self.options.explicit(),
            settings.safe_for_logging(),
        )

    def _section(self, section: Section, schema: Any, options: OptionsLike) -> SectionValidator:
        return SectionValidator(
            section,
            schema,
            merge_options(self.options, options),
            log_failures=self.log_failures,
        )

    def validate_body(self, schema: Any, options: OptionsLike = None) -> SectionValidator:
        return self._section(Section.BODY, schema, options)

    def validate_cookies(self, schema: Any, options: OptionsLike = None) -> SectionValidator:
        return self._section(Section.COOKIES, schema, options)

    def validate_headers(self, schema: Any, options: OptionsLike = None) -> SectionValidator:
        return self._section(Section.HEADERS, schema, options)

    def validate_params(self, schema: Any, options: OptionsLike = None) -> SectionValidator:
        return self._section(Section.PARAMS, schema, options)

    def validate_query(self, schema: Any, options: OptionsLike = None) -> SectionValidator:
        return self._section(Section.QUERY, schema, options)

    def validate_all(self, schema_set: Mapping[Section | str, Any], options: OptionsLike = None) -> AggregateValidator:
        return AggregateValidator(
            schema_set,
            merge_options(self.options, options),
            log_failures=self.log_failures,
        )


def validate_body(schema: Any, options: OptionsLike = None) -> SectionValidator:
    """Validate the parsed request body."""
    return RequestValidator().validate_body(schema, options)


def validate_cookies(schema: Any, options: OptionsLike = None) -> SectionValidator:
    """Validate request cookies."""
    return RequestValidator().validate_cookies(schema, options)


def validate_headers(schema: Any, options: OptionsLike = None) -> SectionValidator:
    """Validate request headers (keys are lowercase)."""
    return RequestValidator().validate_headers(schema, options)


def validate_params(schema: Any, options: OptionsLike = None) -> SectionValidator:
    """Validate path parameters."""
    return RequestValidator().validate_params(schema, options)


def validate_query(schema: Any, options: OptionsLike = None) -> SectionValidator:
    """Validate query parameters."""
    return RequestValidator().validate_query(schema, options)


def validate_all(schema_set: Mapping[Section | str, Any], options: OptionsLike = None) -> AggregateValidator:
    """Validate body, cookies, headers, params and query in one pass."""
    return RequestValidator().validate_all(schema_set, options)


__all__ = [
    "AggregateValidator",
    "RequestValidator",
    "SECTION_ORDER",
    "SectionValidator",
    "validate_all",
    "validate_body",
    "validate_cookies",
    "validate_headers",
    "validate_params",
    "validate_query",
]
