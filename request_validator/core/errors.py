"""Middleware error types, error translation and exception handler registration."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from request_validator.schemas.error import ErrorDetail
from request_validator.schemas.error import MiddlewareErrorResponse
from request_validator.validation.engine import format_location

VALIDATION_CATEGORY = "validation"
BAD_REQUEST_MESSAGE = "Bad Request"

# FastAPI reports parameter locations with singular names.
_FRAMEWORK_LOCATIONS = {
    "body": "body",
    "query": "query",
    "path": "params",
    "header": "headers",
    "cookie": "cookies",
}

SectionErrors = Mapping[str, Sequence[ErrorDetail]]


class MiddlewareError(Exception):
    """Base exception handed to the framework's error channel by middleware steps."""

    def __init__(
        self,
        *,
        category: str,
        message: str,
        status_code: int,
        errors: SectionErrors,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.message = message
        self.status_code = status_code
        self.errors = {section: list(details) for section, details in errors.items()}

    def to_dict(self) -> dict[str, Any]:
        payload = MiddlewareErrorResponse(
            category=self.category,
            message=self.message,
            status_code=self.status_code,
            errors=self.errors,
        )
        return payload.model_dump(by_alias=True, exclude_none=True)


class RequestValidationMiddlewareError(MiddlewareError):
    """One or more request sections failed schema validation."""

    def __init__(self, errors: SectionErrors) -> None:
        super().__init__(
            category=VALIDATION_CATEGORY,
            message=BAD_REQUEST_MESSAGE,
            status_code=status.HTTP_400_BAD_REQUEST,
            errors=errors,
        )

    @property
    def sections(self) -> list[str]:
        """Names of the sections that failed."""
        return list(self.errors)


def translate_errors(errors: SectionErrors) -> RequestValidationMiddlewareError:
    """Wrap per-section diagnostics into the classified middleware error."""
    return RequestValidationMiddlewareError(errors)


def _framework_section_errors(exc: RequestValidationError) -> dict[str, list[ErrorDetail]]:
    grouped: dict[str, list[ErrorDetail]] = {}
    for issue in exc.errors():
        location = tuple(issue.get("loc", ()))
        section = "body"
        if location and location[0] in _FRAMEWORK_LOCATIONS:
            section = _FRAMEWORK_LOCATIONS[location[0]]
            location = location[1:]
        grouped.setdefault(section, []).append(
            ErrorDetail(
                field=format_location(location),
                issue=str(issue.get("msg", "Invalid value")),
                type=issue.get("type"),
            )
        )
    return grouped


async def middleware_error_handler(_: Request, exc: MiddlewareError) -> JSONResponse:
    """Render a middleware error with its own status code."""

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's own parameter validation errors in the same record shape."""

    error = translate_errors(_framework_section_errors(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_error_handlers(app: FastAPI, *, normalize_framework_errors: bool = True) -> None:
    """Attach request validation error handlers to a FastAPI app instance."""

    app.add_exception_handler(MiddlewareError, middleware_error_handler)
    if normalize_framework_errors:
        app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
