"""Role and ownership guard tests."""

from __future__ import annotations

from itertools import combinations
import unittest

from app.domain.authorization import (
    ALLOW,
    AccessContext,
    Decision,
    DecisionReason,
    any_of,
    enforce,
    evaluate,
    ownership_guard,
    require_ownership,
    require_role,
    role_guard,
)
from app.domain.ownership import ResourceKind, ResourceRef
from app.errors import ApiError
from app.schemas.auth import AuthPrincipal, Role


def _role_subsets() -> list[frozenset[Role]]:
    roles = list(Role)
    return [frozenset(combo) for size in range(len(roles) + 1) for combo in combinations(roles, size)]


class RequireRoleTests(unittest.TestCase):
    def test_allows_exactly_when_role_is_in_allowed_set(self) -> None:
        for role in Role:
            principal = AuthPrincipal(user_id="user-1", role=role)
            for allowed in _role_subsets():
                with self.subTest(role=role, allowed=sorted(r.value for r in allowed)):
                    decision = require_role(principal, allowed)
                    self.assertEqual(decision.allowed, role in allowed)
                    expected = DecisionReason.OK if role in allowed else DecisionReason.INSUFFICIENT_ROLE
                    self.assertEqual(decision.reason, expected)

    def test_anonymous_is_denied_with_no_auth_for_every_role_set(self) -> None:
        for allowed in _role_subsets():
            with self.subTest(allowed=sorted(r.value for r in allowed)):
                self.assertEqual(require_role(None, allowed), Decision(False, DecisionReason.NO_AUTH))

    def test_student_is_denied_staff_only_access(self) -> None:
        decision = require_role(AuthPrincipal(user_id="s1", role=Role.STUDENT), [Role.ADMIN, Role.FACULTY])

        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, DecisionReason.INSUFFICIENT_ROLE)


class RequireOwnershipTests(unittest.TestCase):
    def test_direct_owner_is_allowed(self) -> None:
        principal = AuthPrincipal(user_id="u1", role=Role.STUDENT)
        resource = ResourceRef(id="r1", kind=ResourceKind.USER, owner_id="u1")

        self.assertEqual(require_ownership(principal, resource, "owner_id"), ALLOW)

    def test_non_admin_must_match_owner_field(self) -> None:
        resource = ResourceRef(id="r1", kind=ResourceKind.ASSIGNMENT, owner_id="u1", instructor_id="f1")
        for role in (Role.FACULTY, Role.STUDENT):
            with self.subTest(role=role):
                other = AuthPrincipal(user_id="u2", role=role)
                decision = require_ownership(other, resource, "owner_id")
                self.assertFalse(decision.allowed)
                self.assertEqual(decision.reason, DecisionReason.NOT_OWNER)

        instructor = AuthPrincipal(user_id="f1", role=Role.FACULTY)
        self.assertTrue(require_ownership(instructor, resource, "instructor_id").allowed)
        self.assertFalse(require_ownership(instructor, resource, "owner_id").allowed)

    def test_enrolled_set_grants_membership_access(self) -> None:
        resource = ResourceRef(
            id="c1",
            kind=ResourceKind.COURSE,
            instructor_id="f1",
            enrolled_ids=frozenset({"s1", "s2"}),
        )

        self.assertTrue(require_ownership(AuthPrincipal(user_id="s2"), resource, "enrolled_ids").allowed)
        self.assertFalse(require_ownership(AuthPrincipal(user_id="s3"), resource, "enrolled_ids").allowed)

    def test_admin_always_passes(self) -> None:
        admin = AuthPrincipal(user_id="admin-1", role=Role.ADMIN)
        resource = ResourceRef(id="r1", kind=ResourceKind.NOTICE)

        for owner_field in ("owner_id", "instructor_id", "enrolled_ids"):
            with self.subTest(owner_field=owner_field):
                self.assertEqual(require_ownership(admin, resource, owner_field), ALLOW)

    def test_missing_owner_value_never_matches(self) -> None:
        resource = ResourceRef(id="r1", kind=ResourceKind.NOTICE, owner_id=None)

        decision = require_ownership(AuthPrincipal(user_id="u1", role=Role.FACULTY), resource, "owner_id")

        self.assertEqual(decision.reason, DecisionReason.NOT_OWNER)

    def test_unknown_owner_field_is_a_programming_error(self) -> None:
        resource = ResourceRef(id="r1", kind=ResourceKind.NOTICE, owner_id="u1")

        with self.assertRaises(ValueError):
            require_ownership(AuthPrincipal(user_id="u1"), resource, "author")


class GuardCompositionTests(unittest.TestCase):
    def test_first_denial_short_circuits_later_guards(self) -> None:
        calls: list[str] = []

        def _recording_guard(context: AccessContext) -> Decision:
            calls.append("ownership")
            return ALLOW

        context = AccessContext(principal=AuthPrincipal(user_id="s1", role=Role.STUDENT))
        decision = evaluate(context, role_guard(Role.ADMIN), _recording_guard)

        self.assertEqual(decision.reason, DecisionReason.INSUFFICIENT_ROLE)
        self.assertEqual(calls, [])

    def test_role_and_ownership_must_both_pass(self) -> None:
        resource = ResourceRef(id="c1", kind=ResourceKind.COURSE, instructor_id="f1")
        guards = (role_guard(Role.ADMIN, Role.FACULTY), ownership_guard("instructor_id"))

        owner = AccessContext(principal=AuthPrincipal(user_id="f1", role=Role.FACULTY), resource=resource)
        other = AccessContext(principal=AuthPrincipal(user_id="f2", role=Role.FACULTY), resource=resource)

        self.assertEqual(evaluate(owner, *guards), ALLOW)
        self.assertEqual(evaluate(other, *guards).reason, DecisionReason.NOT_OWNER)

    def test_any_of_passes_when_one_alternative_passes(self) -> None:
        resource = ResourceRef(id="e1", kind=ResourceKind.ENROLLMENT, owner_id="s1")
        guard = any_of(role_guard(Role.ADMIN, Role.FACULTY), ownership_guard("owner_id"))

        def decide(user_id: str, role: Role) -> Decision:
            return guard(AccessContext(principal=AuthPrincipal(user_id=user_id, role=role), resource=resource))

        self.assertEqual(decide("f9", Role.FACULTY), ALLOW)
        self.assertEqual(decide("s1", Role.STUDENT), ALLOW)
        self.assertEqual(decide("s2", Role.STUDENT).reason, DecisionReason.NOT_OWNER)

    def test_any_of_requires_at_least_one_guard(self) -> None:
        with self.assertRaises(ValueError):
            any_of()

    def test_with_resource_returns_new_context(self) -> None:
        context = AccessContext(principal=AuthPrincipal(user_id="u1"))
        resource = ResourceRef(id="r1", kind=ResourceKind.USER, owner_id="u1")

        enriched = context.with_resource(resource)

        self.assertIsNone(context.resource)
        self.assertIs(enriched.resource, resource)

    def test_ownership_guard_without_resource_denies(self) -> None:
        context = AccessContext(principal=AuthPrincipal(user_id="u1", role=Role.FACULTY))

        self.assertEqual(ownership_guard("owner_id")(context).reason, DecisionReason.NOT_OWNER)


class EnforceTests(unittest.TestCase):
    def test_allowed_decision_is_a_no_op(self) -> None:
        enforce(ALLOW, AccessContext(principal=None), action="GET /x")

    def test_no_auth_maps_to_401(self) -> None:
        with self.assertRaises(ApiError) as ctx:
            enforce(Decision(False, DecisionReason.NO_AUTH), AccessContext(principal=None), action="GET /x")

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.code, "NO_AUTH")
        self.assertEqual(ctx.exception.payload.message, "Access token required")

    def test_forbidden_reasons_share_a_generic_403(self) -> None:
        context = AccessContext(
            principal=AuthPrincipal(user_id="u1", role=Role.STUDENT),
            resource=ResourceRef(id="r1", kind=ResourceKind.COURSE),
        )
        for reason in (DecisionReason.INSUFFICIENT_ROLE, DecisionReason.NOT_OWNER):
            with self.subTest(reason=reason):
                with self.assertLogs("app.domain.authorization", level="WARNING") as logs:
                    with self.assertRaises(ApiError) as ctx:
                        enforce(Decision(False, reason), context, action="PATCH /courses/r1")

                self.assertEqual(ctx.exception.status_code, 403)
                self.assertEqual(ctx.exception.payload.message, "Insufficient permissions")
                self.assertIn(f"reason={reason.value}", logs.output[0])
                self.assertNotIn("u1", logs.output[0])
