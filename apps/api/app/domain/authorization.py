"""Role and ownership authorization guards."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from enum import Enum
import logging

from app.core.logging_safety import safe_log_identifier
from app.domain.ownership import ResourceRef
from app.errors import ApiError
from app.schemas.auth import AuthPrincipal, Role

logger = logging.getLogger(__name__)

ALL_ROLES: frozenset[Role] = frozenset(Role)
STAFF_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.FACULTY})
ADMIN_ONLY: frozenset[Role] = frozenset({Role.ADMIN})

OWNER_FIELDS: frozenset[str] = frozenset({"owner_id", "instructor_id", "enrolled_ids"})


class DecisionReason(str, Enum):
    OK = "OK"
    NO_AUTH = "NO_AUTH"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
    NOT_OWNER = "NOT_OWNER"


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: DecisionReason


ALLOW = Decision(allowed=True, reason=DecisionReason.OK)


def deny(reason: DecisionReason) -> Decision:
    return Decision(allowed=False, reason=reason)


@dataclass(frozen=True, slots=True)
class AccessContext:
    """Immutable input threaded through a guard pipeline."""

    principal: AuthPrincipal | None
    resource: ResourceRef | None = None

    def with_resource(self, resource: ResourceRef) -> AccessContext:
        return replace(self, resource=resource)


Guard = Callable[[AccessContext], Decision]


def require_role(principal: AuthPrincipal | None, allowed_roles: Iterable[Role]) -> Decision:
    if principal is None:
        return deny(DecisionReason.NO_AUTH)
    if principal.role not in frozenset(allowed_roles):
        return deny(DecisionReason.INSUFFICIENT_ROLE)
    return ALLOW


def require_ownership(principal: AuthPrincipal | None, resource: ResourceRef, owner_field: str) -> Decision:
    """Allow admins, or a principal matching ``owner_field`` on the resource.

    Scalar fields compare by equality; set fields (``enrolled_ids``) by membership.
    """
    if owner_field not in OWNER_FIELDS:
        raise ValueError(f"Unknown ownership field: {owner_field}")
    if principal is None:
        return deny(DecisionReason.NO_AUTH)
    if principal.role is Role.ADMIN:
        return ALLOW

    value = getattr(resource, owner_field)
    if isinstance(value, frozenset):
        owns = principal.user_id in value
    else:
        owns = value is not None and value == principal.user_id
    return ALLOW if owns else deny(DecisionReason.NOT_OWNER)


def role_guard(*roles: Role) -> Guard:
    allowed = frozenset(roles)

    def _guard(context: AccessContext) -> Decision:
        return require_role(context.principal, allowed)

    return _guard


def ownership_guard(*owner_fields: str) -> Guard:
    """Pass when any of ``owner_fields`` ties the principal to the context resource."""
    if not owner_fields:
        raise ValueError("At least one ownership field is required")

    def _guard(context: AccessContext) -> Decision:
        if context.principal is None:
            return deny(DecisionReason.NO_AUTH)
        if context.resource is None:
            return deny(DecisionReason.NOT_OWNER)

        decision = deny(DecisionReason.NOT_OWNER)
        for owner_field in owner_fields:
            decision = require_ownership(context.principal, context.resource, owner_field)
            if decision.allowed:
                return decision
        return decision

    return _guard


def any_of(*guards: Guard) -> Guard:
    """Pass when any guard passes; otherwise return the last denial."""
    if not guards:
        raise ValueError("At least one guard is required")

    def _guard(context: AccessContext) -> Decision:
        decision = deny(DecisionReason.NOT_OWNER)
        for guard in guards:
            decision = guard(context)
            if decision.allowed:
                return decision
        return decision

    return _guard


def evaluate(context: AccessContext, *guards: Guard) -> Decision:
    """Run guards in order and stop at the first denial."""
    for guard in guards:
        decision = guard(context)
        if not decision.allowed:
            return decision
    return ALLOW


def enforce(decision: Decision, context: AccessContext, *, action: str) -> None:
    """Raise the HTTP error for a denied decision; no-op when allowed."""
    if decision.allowed:
        return

    principal = context.principal
    resource = context.resource
    logger.warning(
        "authz.denied action=%s principal_id=%s role=%s reason=%s resource_kind=%s resource_id=%s",
        action,
        safe_log_identifier(principal.user_id if principal else None, prefix="pid"),
        principal.role.value if principal else "anonymous",
        decision.reason.value,
        resource.kind.value if resource else "none",
        safe_log_identifier(resource.id if resource else None, prefix="rid"),
    )
    if decision.reason is DecisionReason.NO_AUTH:
        raise ApiError(status_code=401, code="NO_AUTH", message="Access token required")
    raise ApiError(status_code=403, code="FORBIDDEN", message="Insufficient permissions")


__all__ = [
    "ADMIN_ONLY",
    "ALL_ROLES",
    "ALLOW",
    "AccessContext",
    "Decision",
    "DecisionReason",
    "Guard",
    "STAFF_ROLES",
    "any_of",
    "enforce",
    "evaluate",
    "ownership_guard",
    "require_ownership",
    "require_role",
    "role_guard",
]
