"""Bulk executor tests covering isolation, totals and batch validation."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any
import unittest

from app.domain.bulk import BulkExecutor, bulk_request, collect_outcomes
from app.errors import ApiError, business_rule_violation, not_found
from app.schemas.bulk import MAX_BATCH_SIZE, BulkItemFailure, BulkOperationResult


def _oid(number: int) -> str:
    return f"{number:024x}"


A, B, C, X, Y, Z = (_oid(number) for number in range(1, 7))


class _Operation(str, Enum):
    ACTIVATE = "activate"
    RENAME = "rename"
    ARCHIVE = "archive"


class _FakeAccounts:
    """Tiny id -> active flag store that records every applied mutation."""

    def __init__(self, *ids: str) -> None:
        self.active: dict[str, bool] = {account_id: False for account_id in ids}
        self.names: dict[str, str] = {}
        self.applied: list[str] = []
        self.locked: set[str] = set()

    def activate(self, account_id: str, payload: Mapping[str, Any]) -> None:
        if account_id not in self.active:
            raise not_found("Target user not found")
        if account_id in self.locked:
            raise business_rule_violation("Account is locked")
        self.active[account_id] = True
        self.applied.append(account_id)

    def rename(self, account_id: str, payload: Mapping[str, Any]) -> None:
        if account_id not in self.active:
            raise not_found("Target user not found")
        self.names[account_id] = payload["name"]
        self.applied.append(account_id)


def _executor(accounts: _FakeAccounts) -> BulkExecutor[_Operation]:
    return BulkExecutor(
        resource="user",
        ids_field="userIds",
        handlers={_Operation.ACTIVATE: accounts.activate, _Operation.RENAME: accounts.rename},
        required_payload={_Operation.RENAME: "name"},
    )


class BulkExecutorTests(unittest.TestCase):
    def test_missing_item_is_recorded_and_batch_continues(self) -> None:
        accounts = _FakeAccounts(A, C)

        result = _executor(accounts).run(bulk_request(_Operation.ACTIVATE, [A, B, C]))

        self.assertEqual(
            result,
            BulkOperationResult(
                succeeded=[A, C],
                failed=[BulkItemFailure(id=B, error="Target user not found")],
                total=3,
            ),
        )
        self.assertEqual(accounts.applied, [A, C])

    def test_counts_always_add_up_to_total(self) -> None:
        accounts = _FakeAccounts(A, B, C)
        cases = [
            [A],
            [X],
            [A, B, C],
            [X, Y, Z],
            [A, X, B, Y],
            [A, A, X],
        ]
        for target_ids in cases:
            with self.subTest(target_ids=target_ids):
                result = _executor(accounts).run(bulk_request(_Operation.ACTIVATE, target_ids))
                self.assertEqual(result.total, len(target_ids))
                self.assertEqual(len(result.succeeded) + len(result.failed), len(target_ids))

    def test_every_item_failing_still_returns_a_result(self) -> None:
        result = _executor(_FakeAccounts()).run(bulk_request(_Operation.ACTIVATE, [X, Y]))

        self.assertEqual(result.succeeded, [])
        self.assertEqual([failure.id for failure in result.failed], [X, Y])
        self.assertEqual(result.total, 2)

    def test_items_are_processed_in_input_order(self) -> None:
        accounts = _FakeAccounts(C, A, B)

        result = _executor(accounts).run(bulk_request(_Operation.ACTIVATE, [C, A, B]))

        self.assertEqual(accounts.applied, [C, A, B])
        self.assertEqual(result.succeeded, [C, A, B])

    def test_retrying_only_failed_ids_reaches_final_state(self) -> None:
        accounts = _FakeAccounts(A, B)
        accounts.locked.add(B)
        executor = _executor(accounts)

        first = executor.run(bulk_request(_Operation.ACTIVATE, [A, B]))
        self.assertEqual(first.succeeded, [A])
        self.assertEqual([failure.id for failure in first.failed], [B])

        accounts.locked.clear()
        second = executor.run(bulk_request(_Operation.ACTIVATE, [failure.id for failure in first.failed]))

        self.assertEqual(second.succeeded, [B])
        self.assertEqual(accounts.active, {A: True, B: True})
        self.assertEqual(accounts.applied.count(A), 1)

    def test_unexpected_item_exception_does_not_abort_batch(self) -> None:
        def _explode_on_b(target_id: str, payload: Mapping[str, Any]) -> None:
            if target_id == B:
                raise RuntimeError("store connection reset")

        executor: BulkExecutor[_Operation] = BulkExecutor(
            resource="user",
            ids_field="userIds",
            handlers={_Operation.ACTIVATE: _explode_on_b},
        )

        with self.assertLogs("app.domain.bulk", level="ERROR"):
            result = executor.run(bulk_request(_Operation.ACTIVATE, [A, B, C]))

        self.assertEqual(result.succeeded, [A, C])
        self.assertEqual(result.failed, [BulkItemFailure(id=B, error="Unexpected error")])


class BulkValidationTests(unittest.TestCase):
    def _assert_validation_error(self, exc: ApiError, field: str) -> None:
        self.assertEqual(exc.status_code, 400)
        self.assertEqual(exc.code, "VALIDATION_ERROR")
        self.assertEqual(exc.payload.details["errors"][0]["field"], field)

    def test_empty_batch_is_rejected_without_side_effects(self) -> None:
        accounts = _FakeAccounts(A)

        with self.assertRaises(ApiError) as ctx:
            _executor(accounts).run(bulk_request(_Operation.ACTIVATE, []))

        self._assert_validation_error(ctx.exception, "userIds")
        self.assertEqual(accounts.applied, [])

    def test_oversized_batch_is_rejected_without_side_effects(self) -> None:
        ids = [_oid(index) for index in range(MAX_BATCH_SIZE + 1)]
        accounts = _FakeAccounts(*ids)

        with self.assertRaises(ApiError) as ctx:
            _executor(accounts).run(bulk_request(_Operation.ACTIVATE, ids))

        self._assert_validation_error(ctx.exception, "userIds")
        self.assertEqual(accounts.applied, [])
        self.assertFalse(any(accounts.active.values()))

    def test_batch_at_the_limit_is_accepted(self) -> None:
        ids = [_oid(index) for index in range(MAX_BATCH_SIZE)]

        result = _executor(_FakeAccounts(*ids)).run(bulk_request(_Operation.ACTIVATE, ids))

        self.assertEqual(len(result.succeeded), MAX_BATCH_SIZE)

    def test_malformed_id_rejects_the_whole_batch(self) -> None:
        accounts = _FakeAccounts(A, C)

        with self.assertRaises(ApiError) as ctx:
            _executor(accounts).run(bulk_request(_Operation.ACTIVATE, [A, "not-an-id", C, "g" * 24]))

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.code, "INVALID_ID")
        self.assertEqual(ctx.exception.payload.message, "Invalid user ID format")
        self.assertEqual(
            [error["field"] for error in ctx.exception.payload.details["errors"]],
            ["userIds.1", "userIds.3"],
        )
        self.assertEqual(accounts.applied, [])

    def test_unknown_operation_is_rejected(self) -> None:
        accounts = _FakeAccounts(A)

        with self.assertRaises(ApiError) as ctx:
            _executor(accounts).run(bulk_request(_Operation.ARCHIVE, [A]))

        self._assert_validation_error(ctx.exception, "operation")
        self.assertEqual(accounts.applied, [])

    def test_operation_payload_is_required_before_any_item_runs(self) -> None:
        accounts = _FakeAccounts(A, B)

        with self.assertRaises(ApiError) as ctx:
            _executor(accounts).run(bulk_request(_Operation.RENAME, [A, B], {}))

        self._assert_validation_error(ctx.exception, "name")
        self.assertEqual(accounts.applied, [])

        result = _executor(accounts).run(bulk_request(_Operation.RENAME, [A, B], {"name": "renamed"}))
        self.assertEqual(result.succeeded, [A, B])
        self.assertEqual(accounts.names, {A: "renamed", B: "renamed"})


class CollectOutcomesTests(unittest.TestCase):
    def test_failure_details_are_kept_with_the_item(self) -> None:
        def _attempt(value: int) -> int:
            if value < 0:
                raise ApiError(status_code=400, code="NEGATIVE", message="Negative value", details={"value": value})
            return value * 2

        outcomes = collect_outcomes([1, -2, 3], _attempt, operation="double")

        self.assertEqual(outcomes.succeeded, (2, 6))
        self.assertEqual(len(outcomes.failed), 1)
        self.assertEqual(outcomes.failed[0].item, -2)
        self.assertEqual(outcomes.failed[0].error, "Negative value")
        self.assertEqual(outcomes.failed[0].details, {"value": -2})
        self.assertEqual(outcomes.total, 3)

    def test_result_model_rejects_inconsistent_totals(self) -> None:
        with self.assertRaises(ValueError):
            BulkOperationResult(succeeded=[A], failed=[], total=2)
