"""Enrollment service layer."""

from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.bulk import BulkExecutor, bulk_request
from app.errors import not_found
from app.repositories.memory import EnrollmentRecord, InMemoryStore
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.enrollment import Enrollment, EnrollmentOperation, EnrollmentStatus

_STATUS_OPERATIONS: dict[EnrollmentOperation, tuple[EnrollmentStatus, str]] = {
    EnrollmentOperation.ACTIVATE: (EnrollmentStatus.ACTIVE, "Bulk activation"),
    EnrollmentOperation.SUSPEND: (EnrollmentStatus.SUSPENDED, "Bulk suspension"),
    EnrollmentOperation.COMPLETE: (EnrollmentStatus.COMPLETED, "Bulk completion"),
    EnrollmentOperation.DROP: (EnrollmentStatus.DROPPED, "Bulk drop"),
}


class EnrollmentService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        handlers = {operation: self._fixed_status_handler(operation) for operation in _STATUS_OPERATIONS}
        handlers[EnrollmentOperation.UPDATE_STATUS] = self._update_status_item
        handlers[EnrollmentOperation.UPDATE_GPA] = self._update_gpa_item
        self._executor: BulkExecutor[EnrollmentOperation] = BulkExecutor(
            resource="enrollment",
            ids_field="enrollmentIds",
            handlers=handlers,
            required_payload={
                EnrollmentOperation.UPDATE_STATUS: "status",
                EnrollmentOperation.UPDATE_GPA: "gpa",
            },
        )

    def get_enrollment(self, *, enrollment_id: str) -> Enrollment:
        enrollment = self._require_enrollment(enrollment_id)
        return Enrollment(
            id=enrollment.id,
            student_id=enrollment.student_id,
            program=enrollment.program,
            status=enrollment.status,
            gpa=enrollment.gpa,
            cgpa=enrollment.cgpa,
            enrolled_at=enrollment.enrolled_at,
            completed_at=enrollment.completed_at,
        )

    def bulk_operation(
        self,
        *,
        principal: AuthPrincipal,
        operation: EnrollmentOperation,
        enrollment_ids: Sequence[str],
        data: Mapping[str, Any] | None = None,
    ) -> BulkOperationResult:
        payload = {**(data or {}), "modified_by": principal.user_id}
        return self._executor.run(bulk_request(operation, enrollment_ids, payload))

    def _fixed_status_handler(self, operation: EnrollmentOperation):
        status, note = _STATUS_OPERATIONS[operation]

        def _handler(enrollment_id: str, payload: Mapping[str, Any]) -> None:
            enrollment = self._require_enrollment(enrollment_id)
            self._store.set_enrollment_status(
                enrollment=enrollment,
                status=status,
                modified_by=payload["modified_by"],
                note=note,
            )

        return _handler

    def _update_status_item(self, enrollment_id: str, payload: Mapping[str, Any]) -> None:
        enrollment = self._require_enrollment(enrollment_id)
        self._store.set_enrollment_status(
            enrollment=enrollment,
            status=EnrollmentStatus(payload["status"]),
            modified_by=payload["modified_by"],
            note="Bulk status update",
        )

    def _update_gpa_item(self, enrollment_id: str, payload: Mapping[str, Any]) -> None:
        enrollment = self._require_enrollment(enrollment_id)
        self._store.set_enrollment_gpa(
            enrollment=enrollment,
            gpa=payload["gpa"],
            cgpa=payload.get("cgpa"),
            modified_by=payload["modified_by"],
        )

    def _require_enrollment(self, enrollment_id: str) -> EnrollmentRecord:
        enrollment = self._store.get_enrollment(enrollment_id)
        if enrollment is None:
            raise not_found("Enrollment not found")
        return enrollment
