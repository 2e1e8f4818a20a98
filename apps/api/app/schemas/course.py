"""Course API schemas."""

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class CreateCourseRequest(CamelModel):
    code: str = Field(min_length=2, max_length=20)
    name: str = Field(min_length=1, max_length=200)
    instructor_id: str | None = None


class UpdateCourseRequest(CamelModel):
    code: str | None = Field(default=None, min_length=2, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=200)


class AddStudentRequest(CamelModel):
    student_id: str = Field(min_length=1)


class Course(CamelModel):
    id: str
    code: str
    name: str
    instructor_id: str
    student_ids: list[str]
    created_at: datetime
    updated_at: datetime | None = None
