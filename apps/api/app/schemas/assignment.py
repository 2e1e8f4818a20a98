"""Assignment API schemas."""

from enum import Enum

from pydantic import Field, model_validator

from app.schemas.bulk import MAX_BATCH_SIZE
from app.schemas.common import CamelModel


class AssignmentStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SUBMISSION_CLOSED = "submission_closed"
    GRADING = "grading"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class AssignmentOperation(str, Enum):
    PUBLISH = "publish"
    ARCHIVE = "archive"
    DELETE = "delete"
    UPDATE_STATUS = "updateStatus"


class BulkAssignmentRequest(CamelModel):
    operation: AssignmentOperation
    assignment_ids: list[str] = Field(min_length=1, max_length=MAX_BATCH_SIZE)
    status: AssignmentStatus | None = None

    @model_validator(mode="after")
    def _status_only_for_update(self) -> "BulkAssignmentRequest":
        if self.operation is AssignmentOperation.UPDATE_STATUS and self.status is None:
            raise ValueError("Status is required for updateStatus operation")
        if self.operation is not AssignmentOperation.UPDATE_STATUS and self.status is not None:
            raise ValueError("Status is only allowed for updateStatus operation")
        return self
