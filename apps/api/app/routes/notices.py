"""Notice routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.domain.authorization import STAFF_ROLES
from app.routes.dependencies import get_notice_service, require_roles
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.common import ApiResponse
from app.schemas.error import ErrorResponse, ValidationErrorResponse
from app.schemas.notice import BulkNoticeRequest
from app.services.notices import NoticeService

router = APIRouter(prefix="/notices", tags=["Notices"])

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
async def bulk_notice_operation(
    payload: BulkNoticeRequest,
    principal: Annotated[AuthPrincipal, Depends(_require_staff)],
    service: Annotated[NoticeService, Depends(get_notice_service)],
) -> ApiResponse[BulkOperationResult]:
    result = service.bulk_operation(principal=principal, action=payload.action, notice_ids=payload.notice_ids)
    return ApiResponse(message=f"Bulk {payload.action.value} completed", data=result)
