"""Bulk operation execution with per-item failure isolation."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from functools import reduce
import logging
from typing import Any, Generic, TypeVar

from app.domain.ownership import is_valid_object_id
from app.errors import ApiError, validation_error
from app.schemas.bulk import MAX_BATCH_SIZE, BulkItemFailure, BulkOperationResult

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")
OperationT = TypeVar("OperationT", bound=Enum)

ItemHandler = Callable[[str, Mapping[str, Any]], None]

_UNEXPECTED_ITEM_ERROR = "Unexpected error"


@dataclass(frozen=True, slots=True)
class ItemFailure(Generic[ItemT]):
    item: ItemT
    error: str
    details: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class Outcomes(Generic[ItemT, ResultT]):
    succeeded: tuple[ResultT, ...] = ()
    failed: tuple[ItemFailure[ItemT], ...] = ()

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


def collect_outcomes(
    items: Iterable[ItemT],
    attempt: Callable[[ItemT], ResultT],
    *,
    operation: str,
) -> Outcomes[ItemT, ResultT]:
    """Fold ``attempt`` over ``items`` in order, recording each item's outcome.

    ``ApiError`` messages become the item's error. Anything else is logged and
    recorded generically so the remaining items still run.
    """

    def _step(acc: Outcomes[ItemT, ResultT], item: ItemT) -> Outcomes[ItemT, ResultT]:
        try:
            result = attempt(item)
        except ApiError as exc:
            failure = ItemFailure(item=item, error=exc.payload.message, details=exc.payload.details)
            return replace(acc, failed=acc.failed + (failure,))
        except Exception:
            logger.exception("bulk.item_crashed operation=%s", operation)
            return replace(acc, failed=acc.failed + (ItemFailure(item=item, error=_UNEXPECTED_ITEM_ERROR),))
        return replace(acc, succeeded=acc.succeeded + (result,))

    return reduce(_step, items, Outcomes())


@dataclass(frozen=True, slots=True)
class BulkRequest(Generic[OperationT]):
    operation: OperationT
    target_ids: tuple[str, ...]
    payload: Mapping[str, Any] | None = None


class BulkExecutor(Generic[OperationT]):
    """Apply one named operation to a batch of ids, never aborting on an item failure."""

    def __init__(
        self,
        *,
        resource: str,
        ids_field: str,
        handlers: Mapping[OperationT, ItemHandler],
        required_payload: Mapping[OperationT, str] | None = None,
    ) -> None:
        self._resource = resource
        self._ids_field = ids_field
        self._handlers = dict(handlers)
        self._required_payload = dict(required_payload or {})

    def validate(self, request: BulkRequest[OperationT]) -> None:
        size = len(request.target_ids)
        if size < 1:
            raise validation_error(f"At least one {self._resource} ID is required", field=self._ids_field)
        if size > MAX_BATCH_SIZE:
            raise validation_error(
                f"Cannot process more than {MAX_BATCH_SIZE} {self._resource}s at once",
                field=self._ids_field,
            )
        malformed = [index for index, target_id in enumerate(request.target_ids) if not is_valid_object_id(target_id)]
        if malformed:
            message = f"Invalid {self._resource} ID format"
            raise ApiError(
                status_code=400,
                code="INVALID_ID",
                message=message,
                details={"errors": [{"field": f"{self._ids_field}.{index}", "message": message} for index in malformed]},
            )
        if request.operation not in self._handlers:
            allowed = ", ".join(str(operation.value) for operation in self._handlers)
            raise validation_error(f"Operation must be one of: {allowed}", field="operation")

        payload_field = self._required_payload.get(request.operation)
        if payload_field and (request.payload or {}).get(payload_field) is None:
            raise validation_error(
                f"{payload_field} is required for {request.operation.value} operation",
                field=payload_field,
            )

    def run(self, request: BulkRequest[OperationT]) -> BulkOperationResult:
        self.validate(request)

        handler = self._handlers[request.operation]
        payload = request.payload or {}

        def _attempt(target_id: str) -> str:
            handler(target_id, payload)
            return target_id

        outcomes = collect_outcomes(request.target_ids, _attempt, operation=str(request.operation.value))
        logger.info(
            "bulk.completed resource=%s operation=%s total=%s succeeded=%s failed=%s",
            self._resource,
            request.operation.value,
            len(request.target_ids),
            len(outcomes.succeeded),
            len(outcomes.failed),
        )
        return BulkOperationResult(
            succeeded=list(outcomes.succeeded),
            failed=[BulkItemFailure(id=failure.item, error=failure.error) for failure in outcomes.failed],
            total=len(request.target_ids),
        )


def bulk_request(
    operation: OperationT,
    target_ids: Sequence[str],
    payload: Mapping[str, Any] | None = None,
) -> BulkRequest[OperationT]:
    return BulkRequest(operation=operation, target_ids=tuple(target_ids), payload=payload)


__all__ = [
    "BulkExecutor",
    "BulkRequest",
    "ItemFailure",
    "ItemHandler",
    "Outcomes",
    "bulk_request",
    "collect_outcomes",
]
