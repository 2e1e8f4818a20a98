"""Course grade API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from app.schemas.bulk import MAX_BATCH_SIZE
from app.schemas.common import CamelModel


class GradeStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    FINALIZED = "finalized"


class CourseGrade(CamelModel):
    id: str
    course_id: str
    student_id: str
    final_grade: str
    status: GradeStatus
    created_at: datetime
    submitted_by: str | None = None
    submitted_at: datetime | None = None


class BulkGradeSubmitRequest(CamelModel):
    grade_ids: list[str] = Field(min_length=1, max_length=MAX_BATCH_SIZE)


class GradeOperation(str, Enum):
    SUBMIT = "submit"
