"""Course grade service layer."""

from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.bulk import BulkExecutor, bulk_request
from app.domain.ownership import ResourceRef
from app.errors import business_rule_violation, not_found
from app.repositories.memory import InMemoryStore
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.course_grade import CourseGrade, GradeOperation, GradeStatus


class CourseGradeService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._executor: BulkExecutor[GradeOperation] = BulkExecutor(
            resource="grade",
            ids_field="gradeIds",
            handlers={GradeOperation.SUBMIT: self._submit_item},
        )

    def get_grade(self, *, grade_id: str) -> CourseGrade:
        grade = self._store.get_course_grade(grade_id)
        if grade is None:
            raise not_found("Grade not found")
        return CourseGrade(
            id=grade.id,
            course_id=grade.course_id,
            student_id=grade.student_id,
            final_grade=grade.final_grade,
            status=grade.status,
            created_at=grade.created_at,
            submitted_by=grade.submitted_by,
            submitted_at=grade.submitted_at,
        )

    def bulk_submit(
        self,
        *,
        principal: AuthPrincipal,
        course: ResourceRef,
        grade_ids: Sequence[str],
    ) -> BulkOperationResult:
        """Submit draft grades of ``course``; the caller has already passed the course access guard."""
        payload = {"course_id": course.id, "submitted_by": principal.user_id}
        return self._executor.run(bulk_request(GradeOperation.SUBMIT, grade_ids, payload))

    def _submit_item(self, grade_id: str, payload: Mapping[str, Any]) -> None:
        grade = self._store.get_course_grade(grade_id)
        if grade is None:
            raise not_found("Grade not found")
        if grade.course_id != payload["course_id"]:
            raise business_rule_violation("Grade does not belong to this course")
        if grade.status is not GradeStatus.DRAFT:
            raise business_rule_violation("Grade is already submitted or finalized")

        self._store.submit_course_grade(grade=grade, submitted_by=payload["submitted_by"])
