"""Bulk operation result schemas."""

from pydantic import BaseModel, model_validator

MAX_BATCH_SIZE = 100


class BulkItemFailure(BaseModel):
    id: str
    error: str


class BulkOperationResult(BaseModel):
    succeeded: list[str]
    failed: list[BulkItemFailure]
    total: int

    @model_validator(mode="after")
    def _check_totals(self) -> "BulkOperationResult":
        if len(self.succeeded) + len(self.failed) != self.total:
            raise ValueError("succeeded and failed counts must add up to total")
        return self
