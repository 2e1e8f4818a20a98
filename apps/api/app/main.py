"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.routes import (
    assignments_router,
    course_grades_router,
    courses_router,
    enrollments_router,
    notices_router,
    submissions_router,
    users_router,
)
from app.schemas.error import FieldError, ValidationErrorDetails, ValidationErrorResponse

logger = logging.getLogger(__name__)

_VALIDATION_ERROR_REF = "#/components/schemas/ValidationErrorResponse"


def _field_path(location: tuple | list) -> str:
    # Drop the leading "body"/"path"/"query" segment.
    parts = [str(part) for part in location[1:]] or [str(part) for part in location]
    return ".".join(parts)


def _validation_payload(exc: RequestValidationError) -> ValidationErrorResponse:
    errors = [
        FieldError(field=_field_path(error.get("loc", ())), message=str(error.get("msg", "Invalid value")))
        for error in exc.errors()
    ]
    return ValidationErrorResponse(
        code="VALIDATION_ERROR",
        message="Validation Error",
        details=ValidationErrorDetails(errors=errors),
    )


def _apply_validation_response_codes(schema: dict) -> None:
    """Document request validation failures as 400 instead of FastAPI's default 422."""
    for path_item in schema.get("paths", {}).values():
        for operation in path_item.values():
            if not isinstance(operation, dict):
                continue
            responses = operation.setdefault("responses", {})
            if responses.pop("422", None) is None:
                continue
            bad_request = responses.setdefault("400", {"description": "Validation Error"})
            content = bad_request.setdefault("content", {}).setdefault("application/json", {})
            content.setdefault("schema", {"$ref": _VALIDATION_ERROR_REF})

    components = schema.get("components", {}).get("schemas", {})
    components.pop("HTTPValidationError", None)
    components.pop("ValidationError", None)


def create_app() -> FastAPI:
    app = FastAPI(title="Campus API", version="1.0.0")
    app.state.store = InMemoryStore()

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        payload = _validation_payload(exc)
        logger.info(
            "request.invalid method=%s path=%s error_count=%s",
            request.method,
            request.url.path,
            len(payload.details.errors),
        )
        return JSONResponse(status_code=400, content=payload.model_dump(mode="json"))

    api_prefix = "/api/v1"
    app.include_router(users_router, prefix=api_prefix)
    app.include_router(courses_router, prefix=api_prefix)
    app.include_router(enrollments_router, prefix=api_prefix)
    app.include_router(assignments_router, prefix=api_prefix)
    app.include_router(notices_router, prefix=api_prefix)
    app.include_router(course_grades_router, prefix=api_prefix)
    app.include_router(submissions_router, prefix=api_prefix)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_validation_response_codes(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
