"""User service layer."""

from collections.abc import Mapping, Sequence
import logging
import re
from typing import Any

from app.core.logging_safety import safe_log_identifier
from app.domain.bulk import BulkExecutor, bulk_request, collect_outcomes
from app.errors import ApiError, business_rule_violation, not_found
from app.repositories.memory import InMemoryStore, UserRecord
from app.schemas.auth import AuthPrincipal, Role
from app.schemas.bulk import BulkOperationResult
from app.schemas.user import (
    BulkCreateFailure,
    BulkCreateResult,
    BulkCreateSummary,
    CreateUserItem,
    User,
    UserStatusOperation,
)

logger = logging.getLogger(__name__)

_EMAIL_LOCAL_PART_STRIP = re.compile(r"[^a-z0-9]")
_MAX_EMAIL_SUFFIX = 999


def generated_email_base(first_name: str, last_name: str) -> str:
    first = _EMAIL_LOCAL_PART_STRIP.sub("", first_name.lower())
    last = _EMAIL_LOCAL_PART_STRIP.sub("", last_name.lower())
    return ".".join(part for part in (first, last) if part)


class UserService:
    def __init__(self, store: InMemoryStore, *, email_domain: str = "smartcampus.com") -> None:
        self._store = store
        self._email_domain = email_domain
        self._status_executor: BulkExecutor[UserStatusOperation] = BulkExecutor(
            resource="user",
            ids_field="userIds",
            handlers={
                UserStatusOperation.ACTIVATE: self._activate_item,
                UserStatusOperation.DEACTIVATE: self._deactivate_item,
            },
        )

    def get_user(self, *, user_id: str) -> User:
        record = self._store.get_user(user_id)
        if record is None:
            raise not_found("User not found")
        return self._to_user(record)

    def activate_user(self, *, admin: AuthPrincipal, user_id: str) -> User:
        record = self._activate(admin=admin, user_id=user_id)
        return self._to_user(record)

    def deactivate_user(self, *, admin: AuthPrincipal, user_id: str) -> User:
        record = self._deactivate(admin=admin, user_id=user_id)
        return self._to_user(record)

    def bulk_update_status(
        self,
        *,
        admin: AuthPrincipal,
        operation: UserStatusOperation,
        user_ids: Sequence[str],
    ) -> BulkOperationResult:
        return self._status_executor.run(bulk_request(operation, user_ids, {"admin": admin}))

    def bulk_create(self, *, admin: AuthPrincipal, users: Sequence[CreateUserItem]) -> BulkCreateResult:
        outcomes = collect_outcomes(users, self._create_one, operation="create")
        created = [self._to_user(record) for record in outcomes.succeeded]
        failed = [
            BulkCreateFailure(
                user_data=failure.item.model_dump(mode="json", by_alias=True, exclude_none=True),
                error=failure.error,
                generated_email=(failure.details or {}).get("generated_email"),
            )
            for failure in outcomes.failed
        ]
        logger.info(
            "users.bulk_created admin_id=%s total=%s created=%s failed=%s",
            safe_log_identifier(admin.user_id, prefix="pid"),
            len(users),
            len(created),
            len(failed),
        )
        return BulkCreateResult(
            created=created,
            failed=failed,
            summary=BulkCreateSummary(total=len(users), created=len(created), failed=len(failed)),
        )

    def _create_one(self, item: CreateUserItem) -> UserRecord:
        if item.email is not None:
            email = item.email.lower()
            if self._store.email_exists(email):
                raise ApiError(
                    status_code=409,
                    code="DUPLICATE_EMAIL",
                    message="User with this email already exists",
                    details={"generated_email": email},
                )
        else:
            email = self._unique_email(item.first_name, item.last_name)

        return self._store.create_user(
            first_name=item.first_name,
            last_name=item.last_name,
            email=email,
            role=item.role,
            department=item.department,
        )

    def _unique_email(self, first_name: str, last_name: str) -> str:
        base = generated_email_base(first_name, last_name)
        if not base:
            raise business_rule_violation("Cannot generate an email from an empty name")

        candidate = f"{base}@{self._email_domain}"
        suffix = 0
        while self._store.email_exists(candidate):
            suffix += 1
            if suffix > _MAX_EMAIL_SUFFIX:
                raise ApiError(
                    status_code=409,
                    code="DUPLICATE_EMAIL",
                    message="User with this email already exists",
                    details={"generated_email": f"{base}@{self._email_domain}"},
                )
            candidate = f"{base}{suffix:03d}@{self._email_domain}"
        if suffix:
            logger.info(
                "users.email_suffixed base=%s suffix=%03d",
                safe_log_identifier(f"{base}@{self._email_domain}", prefix="eml"),
                suffix,
            )
        return candidate

    def _activate_item(self, user_id: str, payload: Mapping[str, Any]) -> None:
        self._activate(admin=payload["admin"], user_id=user_id)

    def _deactivate_item(self, user_id: str, payload: Mapping[str, Any]) -> None:
        self._deactivate(admin=payload["admin"], user_id=user_id)

    def _activate(self, *, admin: AuthPrincipal, user_id: str) -> UserRecord:
        target = self._store.get_user(user_id)
        if target is None:
            raise not_found("Target user not found")

        if not target.is_active:
            self._store.set_user_active(user=target, is_active=True)
            logger.info(
                "users.activated admin_id=%s user_id=%s",
                safe_log_identifier(admin.user_id, prefix="pid"),
                safe_log_identifier(target.id, prefix="uid"),
            )
        return target

    def _deactivate(self, *, admin: AuthPrincipal, user_id: str) -> UserRecord:
        target = self._store.get_user(user_id)
        if target is None:
            raise not_found("Target user not found")
        if target.id == admin.user_id:
            raise business_rule_violation("Admin cannot deactivate their own account")
        if target.role is Role.ADMIN:
            raise business_rule_violation("Cannot deactivate admin accounts")

        if target.is_active:
            self._store.set_user_active(user=target, is_active=False)
            logger.info(
                "users.deactivated admin_id=%s user_id=%s",
                safe_log_identifier(admin.user_id, prefix="pid"),
                safe_log_identifier(target.id, prefix="uid"),
            )
        return target

    @staticmethod
    def _to_user(record: UserRecord) -> User:
        return User(
            id=record.id,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            role=record.role,
            is_active=record.is_active,
            department=record.department,
            created_at=record.created_at,
        )
