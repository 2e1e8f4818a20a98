"""Enrollment routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.domain.authorization import ADMIN_ONLY, STAFF_ROLES
from app.domain.ownership import ResourceKind, ResourceRef
from app.routes.dependencies import get_enrollment_service, require_resource_access, require_roles
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.common import ApiResponse
from app.schemas.enrollment import BulkEnrollmentRequest, Enrollment
from app.schemas.error import ErrorResponse, ValidationErrorResponse
from app.services.enrollments import EnrollmentService

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])

_require_admin = require_roles(*ADMIN_ONLY)
# Students read their own enrollment; staff read any.
_can_read_enrollment = require_resource_access(
    ResourceKind.ENROLLMENT,
    "enrollmentId",
    "owner_id",
    readers=STAFF_ROLES,
)


@router.post(
    "/bulk",
    response_model=ApiResponse[BulkOperationResult],
    responses={
        400: {"model": ValidationErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)
async def bulk_enrollment_operation(
    payload: BulkEnrollmentRequest,
    principal: Annotated[AuthPrincipal, Depends(_require_admin)],
    service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
) -> ApiResponse[BulkOperationResult]:
    result = service.bulk_operation(
        principal=principal,
        operation=payload.operation,
        enrollment_ids=payload.enrollment_ids,
        data=payload.data.model_dump(exclude_none=True) if payload.data else None,
    )
    return ApiResponse(message=f"Bulk operation {payload.operation.value} completed", data=result)


@router.get(
    "/{enrollmentId}",
    response_model=ApiResponse[Enrollment],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def get_enrollment(
    enrollment_id: Annotated[str, Path(alias="enrollmentId")],
    enrollment: Annotated[ResourceRef, Depends(_can_read_enrollment)],
    service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
) -> ApiResponse[Enrollment]:
    return ApiResponse(
        message="Enrollment retrieved successfully",
        data=service.get_enrollment(enrollment_id=enrollment.id),
    )
