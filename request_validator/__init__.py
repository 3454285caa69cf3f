"""Request validation middleware for FastAPI routes."""

from request_validator.core.errors import MiddlewareError
from request_validator.core.errors import RequestValidationMiddlewareError
from request_validator.core.errors import register_error_handlers
from request_validator.core.errors import translate_errors
from request_validator.middleware.validators import AggregateValidator
from request_validator.middleware.validators import RequestValidator
from request_validator.middleware.validators import SectionValidator
from request_validator.middleware.validators import validate_all
from request_validator.middleware.validators import validate_body
from request_validator.middleware.validators import validate_cookies
from request_validator.middleware.validators import validate_headers
from request_validator.middleware.validators import validate_params
from request_validator.middleware.validators import validate_query
from request_validator.schemas.error import ErrorDetail
from request_validator.validation.engine import PydanticSchema
from request_validator.validation.engine import Schema
from request_validator.validation.engine import ValidationOutcome
from request_validator.validation.options import ValidationOptions
from request_validator.validation.options import merge_options
from request_validator.validation.sections import RequestSections
from request_validator.validation.sections import Section

__all__ = [
    "AggregateValidator",
    "ErrorDetail",
    "MiddlewareError",
    "PydanticSchema",
    "RequestSections",
    "RequestValidationMiddlewareError",
    "RequestValidator",
    "Schema",
    "Section",
    "SectionValidator",
    "ValidationOptions",
    "ValidationOutcome",
    "merge_options",
    "register_error_handlers",
    "translate_errors",
    "validate_all",
    "validate_body",
    "validate_cookies",
    "validate_headers",
    "validate_params",
    "validate_query",
]
