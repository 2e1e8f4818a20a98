"""Assignment routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.domain.authorization import STAFF_ROLES
from app.routes.dependencies import get_assignment_service, require_roles
from app.schemas.assignment import BulkAssignmentRequest
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.common import ApiResponse
from app.schemas.error import ErrorResponse, ValidationErrorResponse
from app.services.assignments import AssignmentService

router = APIRouter(prefix="/assignments", tags=["Assignments"])

_require_staff = require_roles(*STAFF_ROLES)


@router.post(
    "/bulk",
    response_model=ApiResponse[BulkOperationResult],
    responses={
        400: {"model": ValidationErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)
async def bulk_assignment_operation(
    payload: BulkAssignmentRequest,
    principal: Annotated[AuthPrincipal, Depends(_require_staff)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> ApiResponse[BulkOperationResult]:
    result = service.bulk_operation(
        principal=principal,
        operation=payload.operation,
        assignment_ids=payload.assignment_ids,
        status=payload.status,
    )
    return ApiResponse(message="Bulk operation completed successfully", data=result)
