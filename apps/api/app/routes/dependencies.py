"""Dependency wiring for routes."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.auth import (
    AuthVerificationError,
    JwtTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
)
from app.core.config import Settings, get_settings
from app.core.logging_safety import safe_log_identifier
from app.domain.authorization import ALL_ROLES, AccessContext, any_of, enforce, evaluate, ownership_guard, role_guard
from app.domain.ownership import OwnershipResolver, ResourceKind, ResourceRef
from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.schemas.auth import AuthPrincipal, Role
from app.services.assignments import AssignmentService
from app.services.course_grades import CourseGradeService
from app.services.courses import CourseService
from app.services.enrollments import EnrollmentService
from app.services.notices import NoticeService
from app.services.submissions import SubmissionService
from app.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def _auth_error(message: str) -> ApiError:
    return ApiError(status_code=401, code="NO_AUTH", message=message)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id") or f"req-{uuid4()}"
    request.state.correlation_id = correlation_id
    return correlation_id


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "jwt":
        return JwtTokenVerifier(secret=settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return MockTokenVerifier()


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> AuthPrincipal:
    """Validate the bearer token and load the principal from the stored account."""
    safe_correlation_id = safe_log_identifier(_request_correlation_id(request), prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error("Access token required")

    try:
        claimed = verifier.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error(str(exc) or "Invalid token") from exc

    user = store.get_user(claimed.user_id)
    if user is None or not user.is_active:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s principal_id=%s reason=unknown_or_inactive_user",
            safe_correlation_id,
            request.method,
            request.url.path,
            safe_log_identifier(claimed.user_id, prefix="pid"),
        )
        raise _auth_error("Invalid or inactive user")

    principal = AuthPrincipal(user_id=user.id, role=user.role, is_active=user.is_active)
    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s role=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.user_id, prefix="pid"),
        principal.role.value,
    )
    return principal


def require_roles(*roles: Role) -> Callable[..., Awaitable[AuthPrincipal]]:
    """Build a dependency that admits only principals holding one of ``roles``."""
    guard = role_guard(*roles)

    async def _dependency(
        request: Request,
        principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    ) -> AuthPrincipal:
        context = AccessContext(principal=principal)
        enforce(evaluate(context, guard), context, action=f"{request.method} {request.url.path}")
        return principal

    return _dependency


def get_ownership_resolver(store: Annotated[InMemoryStore, Depends(get_store)]) -> OwnershipResolver:
    return OwnershipResolver(store)


def require_resource_access(
    kind: ResourceKind,
    path_param: str,
    *owner_fields: str,
    roles: Iterable[Role] = ALL_ROLES,
    readers: Iterable[Role] = (),
    missing_message: str | None = None,
) -> Callable[..., Awaitable[ResourceRef]]:
    """Build a dependency checking role first, then ownership of the path resource.

    The resource is only looked up once the role check passes. Principals holding
    one of ``readers`` skip the ownership check.
    """
    roles_allowed = role_guard(*roles)
    owns_resource = ownership_guard(*owner_fields)
    reader_roles = tuple(readers)
    if reader_roles:
        owns_resource = any_of(role_guard(*reader_roles), owns_resource)

    async def _dependency(
        request: Request,
        principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
        resolver: Annotated[OwnershipResolver, Depends(get_ownership_resolver)],
    ) -> ResourceRef:
        action = f"{request.method} {request.url.path}"
        context = AccessContext(principal=principal)
        enforce(evaluate(context, roles_allowed), context, action=action)

        resource = resolver.resolve(kind, request.path_params[path_param], missing_message=missing_message)
        context = context.with_resource(resource)
        enforce(evaluate(context, owns_resource), context, action=action)
        return resource

    return _dependency


def get_user_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserService:
    return UserService(store, email_domain=settings.email_domain)


def get_course_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> CourseService:
    return CourseService(store)


def get_enrollment_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> EnrollmentService:
    return EnrollmentService(store)


def get_assignment_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> AssignmentService:
    return AssignmentService(store)


def get_notice_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> NoticeService:
    return NoticeService(store)


def get_course_grade_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> CourseGradeService:
    return CourseGradeService(store)


def get_submission_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> SubmissionService:
    return SubmissionService(store)
