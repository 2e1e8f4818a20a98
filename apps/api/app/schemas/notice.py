"""Notice API schemas."""

from enum import Enum

from pydantic import Field

from app.schemas.bulk import MAX_BATCH_SIZE
from app.schemas.common import CamelModel


class NoticeStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class NoticeAction(str, Enum):
    PUBLISH = "publish"
    ARCHIVE = "archive"
    PIN = "pin"
    UNPIN = "unpin"
    FEATURE = "feature"
    UNFEATURE = "unfeature"


class BulkNoticeRequest(CamelModel):
    action: NoticeAction
    notice_ids: list[str] = Field(min_length=1, max_length=MAX_BATCH_SIZE)
