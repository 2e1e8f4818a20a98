"""Application exception types."""

from typing import Any

from app.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error rendered as the standard failure envelope."""

    def __init__(self, status_code: int, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.payload.code


def not_found(message: str) -> ApiError:
    return ApiError(status_code=404, code="NOT_FOUND", message=message)


def business_rule_violation(message: str) -> ApiError:
    return ApiError(status_code=400, code="BUSINESS_RULE_VIOLATION", message=message)


def validation_error(message: str, *, field: str) -> ApiError:
    return ApiError(
        status_code=400,
        code="VALIDATION_ERROR",
        message="Validation Error",
        details={"errors": [{"field": field, "message": message}]},
    )


__all__ = ["ApiError", "business_rule_violation", "not_found", "validation_error"]
