"""Submission routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.domain.authorization import STAFF_ROLES
from app.routes.dependencies import get_submission_service, require_roles
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.common import ApiResponse
from app.schemas.error import ErrorResponse, ValidationErrorResponse
from app.schemas.submission import BulkSubmissionRequest
from app.services.submissions import SubmissionService

router = APIRouter(prefix="/submissions", tags=["Submissions"])

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
async def bulk_submission_operation(
    payload: BulkSubmissionRequest,
    principal: Annotated[AuthPrincipal, Depends(_require_staff)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> ApiResponse[BulkOperationResult]:
    result = service.bulk_operation(
        principal=principal,
        operation=payload.operation,
        submission_ids=payload.submission_ids,
        data=payload.data.model_dump(by_alias=True, exclude_none=True) if payload.data else None,
    )
    return ApiResponse(message="Bulk operation completed successfully", data=result)
