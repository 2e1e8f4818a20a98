"""Assignment service layer."""

from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.authorization import AccessContext, evaluate, ownership_guard
from app.domain.bulk import BulkExecutor, bulk_request
from app.domain.ownership import ResourceKind
from app.errors import ApiError, business_rule_violation, not_found
from app.repositories.memory import AssignmentRecord, InMemoryStore
from app.schemas.assignment import AssignmentOperation, AssignmentStatus
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult

# Faculty may modify assignments they teach or created.
_can_modify = ownership_guard("instructor_id", "owner_id")


class AssignmentService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._executor: BulkExecutor[AssignmentOperation] = BulkExecutor(
            resource="assignment",
            ids_field="assignmentIds",
            handlers={
                AssignmentOperation.PUBLISH: self._publish_item,
                AssignmentOperation.ARCHIVE: self._archive_item,
                AssignmentOperation.DELETE: self._delete_item,
                AssignmentOperation.UPDATE_STATUS: self._update_status_item,
            },
            required_payload={AssignmentOperation.UPDATE_STATUS: "status"},
        )

    def bulk_operation(
        self,
        *,
        principal: AuthPrincipal,
        operation: AssignmentOperation,
        assignment_ids: Sequence[str],
        status: AssignmentStatus | None = None,
    ) -> BulkOperationResult:
        payload = {"principal": principal, "status": status}
        return self._executor.run(bulk_request(operation, assignment_ids, payload))

    def _publish_item(self, assignment_id: str, payload: Mapping[str, Any]) -> None:
        principal: AuthPrincipal = payload["principal"]
        assignment = self._require_modifiable(assignment_id, principal)
        self._store.set_assignment_status(
            assignment=assignment,
            status=AssignmentStatus.PUBLISHED,
            is_visible=True,
            modified_by=principal.user_id,
        )

    def _archive_item(self, assignment_id: str, payload: Mapping[str, Any]) -> None:
        principal: AuthPrincipal = payload["principal"]
        assignment = self._require_modifiable(assignment_id, principal)
        self._store.set_assignment_status(
            assignment=assignment,
            status=AssignmentStatus.ARCHIVED,
            is_visible=False,
            modified_by=principal.user_id,
        )

    def _delete_item(self, assignment_id: str, payload: Mapping[str, Any]) -> None:
        assignment = self._require_modifiable(assignment_id, payload["principal"])
        if assignment.status is AssignmentStatus.PUBLISHED:
            raise business_rule_violation("Cannot delete a published assignment")
        self._store.delete_assignment(assignment.id)

    def _update_status_item(self, assignment_id: str, payload: Mapping[str, Any]) -> None:
        principal: AuthPrincipal = payload["principal"]
        assignment = self._require_modifiable(assignment_id, principal)
        self._store.set_assignment_status(
            assignment=assignment,
            status=AssignmentStatus(payload["status"]),
            modified_by=principal.user_id,
        )

    def _require_modifiable(self, assignment_id: str, principal: AuthPrincipal) -> AssignmentRecord:
        ref = self._store.get_resource_ref(ResourceKind.ASSIGNMENT, assignment_id)
        if ref is None:
            raise not_found("Assignment not found")

        decision = evaluate(AccessContext(principal=principal, resource=ref), _can_modify)
        if not decision.allowed:
            raise ApiError(status_code=403, code="FORBIDDEN", message="Access denied")

        assignment = self._store.get_assignment(assignment_id)
        if assignment is None:
            raise not_found("Assignment not found")
        return assignment
