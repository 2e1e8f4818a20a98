"""Resource ownership references and their resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import re
from typing import TYPE_CHECKING

from app.errors import ApiError, not_found

if TYPE_CHECKING:
    from app.repositories.memory import InMemoryStore

_OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


class ResourceKind(str, Enum):
    USER = "user"
    COURSE = "course"
    ENROLLMENT = "enrollment"
    ASSIGNMENT = "assignment"
    NOTICE = "notice"
    COURSE_GRADE = "course_grade"
    SUBMISSION = "submission"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True, slots=True)
class ResourceRef:
    """Minimal projection of a resource needed to decide access."""

    id: str
    kind: ResourceKind
    owner_id: str | None = None
    instructor_id: str | None = None
    enrolled_ids: frozenset[str] = field(default_factory=frozenset)


def is_valid_object_id(value: str) -> bool:
    return bool(_OBJECT_ID_PATTERN.fullmatch(value))


class OwnershipResolver:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def resolve(self, kind: ResourceKind, resource_id: str, *, missing_message: str | None = None) -> ResourceRef:
        """Return the access projection for ``resource_id``.

        Malformed ids fail with 400 ``INVALID_ID`` before any lookup; well-formed
        ids with no matching record fail with 404 ``NOT_FOUND``, using ``missing_message``
        when the caller names the resource differently.
        """
        if not is_valid_object_id(resource_id):
            raise ApiError(status_code=400, code="INVALID_ID", message=f"Invalid {kind.label} ID format")

        ref = self._store.get_resource_ref(kind, resource_id)
        if ref is None:
            raise not_found(missing_message or f"{kind.label.capitalize()} not found")
        return ref


__all__ = ["OwnershipResolver", "ResourceKind", "ResourceRef", "is_valid_object_id"]
