"""Submission API schemas."""

from enum import Enum

from pydantic import Field

from app.schemas.bulk import MAX_BATCH_SIZE
from app.schemas.common import CamelModel

# Similarity above this percentage flags a submission for review.
PLAGIARISM_FLAG_THRESHOLD = 30.0


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    GRADED = "graded"
    RETURNED = "returned"
    LATE = "late"
    REJECTED = "rejected"


class SubmissionOperation(str, Enum):
    GRADE = "grade"
    RETURN = "return"
    MARK_LATE = "markLate"
    CHECK_PLAGIARISM = "checkPlagiarism"
    VERIFY = "verify"
    DELETE = "delete"


class SubmissionBulkData(CamelModel):
    grade: str | None = Field(default=None, max_length=20)
    numerical_score: float | None = Field(default=None, ge=0, le=100)
    feedback: str | None = Field(default=None, max_length=2000)
    penalty: float | None = Field(default=None, ge=0, le=100)
    similarity_score: float | None = Field(default=None, ge=0, le=100)
    report_url: str | None = None
    notes: str | None = Field(default=None, max_length=1000)


class BulkSubmissionRequest(CamelModel):
    operation: SubmissionOperation
    submission_ids: list[str] = Field(min_length=1, max_length=MAX_BATCH_SIZE)
    data: SubmissionBulkData | None = None
