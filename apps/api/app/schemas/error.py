"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    code: str
    message: str
    details: dict[str, Any] | None = None


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrorDetails(BaseModel):
    errors: list[FieldError]


class ValidationErrorResponse(BaseModel):
    success: Literal[False] = False
    code: Literal["VALIDATION_ERROR"]
    message: str
    details: ValidationErrorDetails
