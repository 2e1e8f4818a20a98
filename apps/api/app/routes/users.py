"""User routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from app.domain.authorization import ADMIN_ONLY
from app.domain.ownership import ResourceKind, ResourceRef
from app.routes.dependencies import get_user_service, require_resource_access, require_roles
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.common import ApiResponse
from app.schemas.error import ErrorResponse, ValidationErrorResponse
from app.schemas.user import BulkCreateResult, BulkCreateUsersRequest, BulkUserStatusRequest, User
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])

_require_admin = require_roles(*ADMIN_ONLY)
_own_user = require_resource_access(ResourceKind.USER, "userId", "owner_id")
_admin_user = require_resource_access(
    ResourceKind.USER,
    "userId",
    "owner_id",
    roles=ADMIN_ONLY,
    missing_message="Target user not found",
)

_AUTH_RESPONSES = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


@router.post(
    "/bulk",
    response_model=ApiResponse[BulkCreateResult],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ValidationErrorResponse}, **_AUTH_RESPONSES},
)
async def bulk_create_users(
    payload: BulkCreateUsersRequest,
    admin: Annotated[AuthPrincipal, Depends(_require_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse[BulkCreateResult]:
    result = service.bulk_create(admin=admin, users=payload.users)
    return ApiResponse(message="Bulk user creation completed", data=result)


@router.post(
    "/bulk-status",
    response_model=ApiResponse[BulkOperationResult],
    responses={400: {"model": ValidationErrorResponse}, **_AUTH_RESPONSES},
)
async def bulk_update_user_status(
    payload: BulkUserStatusRequest,
    admin: Annotated[AuthPrincipal, Depends(_require_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse[BulkOperationResult]:
    result = service.bulk_update_status(admin=admin, operation=payload.operation, user_ids=payload.user_ids)
    return ApiResponse(message=f"Bulk {payload.operation.value} completed", data=result)


@router.get(
    "/{userId}",
    response_model=ApiResponse[User],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, **_AUTH_RESPONSES},
)
async def get_user(
    user_id: Annotated[str, Path(alias="userId")],
    user: Annotated[ResourceRef, Depends(_own_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse[User]:
    return ApiResponse(message="User retrieved successfully", data=service.get_user(user_id=user.id))


@router.patch(
    "/{userId}/deactivate",
    response_model=ApiResponse[User],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, **_AUTH_RESPONSES},
)
async def deactivate_user(
    user_id: Annotated[str, Path(alias="userId")],
    admin: Annotated[AuthPrincipal, Depends(_require_admin)],
    user: Annotated[ResourceRef, Depends(_admin_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse[User]:
    return ApiResponse(
        message="User deactivated successfully",
        data=service.deactivate_user(admin=admin, user_id=user.id),
    )


@router.patch(
    "/{userId}/activate",
    response_model=ApiResponse[User],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, **_AUTH_RESPONSES},
)
async def activate_user(
    user_id: Annotated[str, Path(alias="userId")],
    admin: Annotated[AuthPrincipal, Depends(_require_admin)],
    user: Annotated[ResourceRef, Depends(_admin_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse[User]:
    return ApiResponse(
        message="User activated successfully",
        data=service.activate_user(admin=admin, user_id=user.id),
    )
