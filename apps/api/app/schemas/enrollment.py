"""Enrollment API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import Field, model_validator

from app.schemas.bulk import MAX_BATCH_SIZE
from app.schemas.common import CamelModel


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"
    SUSPENDED = "suspended"
    GRADUATED = "graduated"


class EnrollmentOperation(str, Enum):
    ACTIVATE = "activate"
    SUSPEND = "suspend"
    COMPLETE = "complete"
    DROP = "drop"
    UPDATE_STATUS = "update_status"
    UPDATE_GPA = "update_gpa"


class Enrollment(CamelModel):
    id: str
    student_id: str
    program: str
    status: EnrollmentStatus
    gpa: float | None = None
    cgpa: float | None = None
    enrolled_at: datetime
    completed_at: datetime | None = None


class EnrollmentBulkData(CamelModel):
    status: EnrollmentStatus | None = None
    gpa: float | None = Field(default=None, ge=0, le=4)
    cgpa: float | None = Field(default=None, ge=0, le=4)


class BulkEnrollmentRequest(CamelModel):
    operation: EnrollmentOperation
    enrollment_ids: list[str] = Field(min_length=1, max_length=MAX_BATCH_SIZE)
    data: EnrollmentBulkData | None = None

    @model_validator(mode="after")
    def _require_operation_data(self) -> "BulkEnrollmentRequest":
        if self.operation is EnrollmentOperation.UPDATE_STATUS and (self.data is None or self.data.status is None):
            raise ValueError("data.status is required for update_status operation")
        if self.operation is EnrollmentOperation.UPDATE_GPA and (self.data is None or self.data.gpa is None):
            raise ValueError("data.gpa is required for update_gpa operation")
        return self
