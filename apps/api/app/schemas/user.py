"""User API schemas."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from app.schemas.auth import Role
from app.schemas.bulk import MAX_BATCH_SIZE
from app.schemas.common import CamelModel

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserStatusOperation(str, Enum):
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


class User(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: Role
    is_active: bool
    department: str | None = None
    created_at: datetime


class BulkUserStatusRequest(CamelModel):
    operation: UserStatusOperation
    user_ids: list[str] = Field(min_length=1, max_length=MAX_BATCH_SIZE)


class CreateUserItem(CamelModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    role: Role
    email: str | None = Field(default=None, pattern=_EMAIL_PATTERN)
    department: str | None = None


class BulkCreateUsersRequest(CamelModel):
    users: list[CreateUserItem] = Field(min_length=1, max_length=MAX_BATCH_SIZE)


class BulkCreateFailure(CamelModel):
    user_data: dict[str, Any]
    error: str
    generated_email: str | None = None


class BulkCreateSummary(CamelModel):
    total: int
    created: int
    failed: int


class BulkCreateResult(CamelModel):
    created: list[User]
    failed: list[BulkCreateFailure]
    summary: BulkCreateSummary
