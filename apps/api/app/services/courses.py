"""Course service layer."""

import logging

from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError, business_rule_violation, not_found
from app.repositories.memory import CourseRecord, InMemoryStore
from app.schemas.auth import AuthPrincipal, Role
from app.schemas.course import Course

logger = logging.getLogger(__name__)


class CourseService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create_course(
        self,
        *,
        principal: AuthPrincipal,
        code: str,
        name: str,
        instructor_id: str | None,
    ) -> Course:
        if principal.role is Role.FACULTY:
            instructor_id = principal.user_id
        elif not instructor_id:
            raise ApiError(
                status_code=400,
                code="VALIDATION_ERROR",
                message="Validation Error",
                details={"errors": [{"field": "instructorId", "message": "Instructor ID is required"}]},
            )

        instructor = self._store.get_user(instructor_id)
        if instructor is None:
            raise not_found("Instructor not found")
        if instructor.role is not Role.FACULTY:
            raise business_rule_violation("Course instructor must be a faculty member")

        record = self._store.create_course(code=code, name=name, instructor_id=instructor_id)
        logger.info(
            "courses.created course_id=%s instructor_id=%s",
            safe_log_identifier(record.id, prefix="rid"),
            safe_log_identifier(instructor_id, prefix="pid"),
        )
        return self._to_course(record)

    def get_course(self, *, course_id: str) -> Course:
        return self._to_course(self._require_course(course_id))

    def update_course(self, *, course_id: str, code: str | None, name: str | None) -> Course:
        record = self._require_course(course_id)
        self._store.update_course(course=record, code=code, name=name)
        return self._to_course(record)

    def add_student(self, *, course_id: str, student_id: str) -> Course:
        record = self._require_course(course_id)
        student = self._store.get_user(student_id)
        if student is None:
            raise not_found("Student not found")
        if student.role is not Role.STUDENT:
            raise business_rule_violation("Only students can be enrolled in a course")

        self._store.add_course_student(course=record, student_id=student.id)
        return self._to_course(record)

    def _require_course(self, course_id: str) -> CourseRecord:
        record = self._store.get_course(course_id)
        if record is None:
            raise not_found("Course not found")
        return record

    @staticmethod
    def _to_course(record: CourseRecord) -> Course:
        return Course(
            id=record.id,
            code=record.code,
            name=record.name,
            instructor_id=record.instructor_id,
            student_ids=list(record.student_ids),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
