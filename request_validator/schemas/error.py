"""Error payload schemas shared by validators and error handlers."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ErrorDetail(BaseModel):
    """Single constraint violation reported by the schema engine."""

    model_config = ConfigDict(frozen=True)

    field: str
    issue: str
    type: str | None = None


class MiddlewareErrorResponse(BaseModel):
    """Response body rendered for a rejected request."""

    category: str
    message: str
    status_code: int = Field(serialization_alias="statusCode")
    errors: dict[str, list[ErrorDetail]]
