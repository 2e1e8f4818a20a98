"""Submission service layer."""

from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.authorization import AccessContext, evaluate, ownership_guard
from app.domain.bulk import BulkExecutor, bulk_request
from app.domain.ownership import ResourceKind
from app.errors import ApiError, not_found
from app.repositories.memory import InMemoryStore, SubmissionRecord
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.submission import SubmissionOperation

# Faculty may only act on submissions to assignments they teach.
_teaches_assignment = ownership_guard("instructor_id")


class SubmissionService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._executor: BulkExecutor[SubmissionOperation] = BulkExecutor(
            resource="submission",
            ids_field="submissionIds",
            handlers={
                SubmissionOperation.GRADE: self._grade_item,
                SubmissionOperation.RETURN: self._return_item,
                SubmissionOperation.MARK_LATE: self._mark_late_item,
                SubmissionOperation.CHECK_PLAGIARISM: self._check_plagiarism_item,
                SubmissionOperation.VERIFY: self._verify_item,
                SubmissionOperation.DELETE: self._delete_item,
            },
            required_payload={
                SubmissionOperation.GRADE: "numericalScore",
                SubmissionOperation.CHECK_PLAGIARISM: "similarityScore",
            },
        )

    def bulk_operation(
        self,
        *,
        principal: AuthPrincipal,
        operation: SubmissionOperation,
        submission_ids: Sequence[str],
        data: Mapping[str, Any] | None = None,
    ) -> BulkOperationResult:
        """Apply ``operation`` to each submission; ``data`` uses the request's camelCase keys."""
        payload = {**(data or {}), "principal": principal}
        return self._executor.run(bulk_request(operation, submission_ids, payload))

    def _grade_item(self, submission_id: str, payload: Mapping[str, Any]) -> None:
        principal: AuthPrincipal = payload["principal"]
        submission = self._require_reviewable(submission_id, principal)
        self._store.grade_submission(
            submission=submission,
            numerical_score=payload["numericalScore"],
            grade=payload.get("grade"),
            feedback=payload.get("feedback"),
            reviewed_by=principal.user_id,
        )

    def _return_item(self, submission_id: str, payload: Mapping[str, Any]) -> None:
        principal: AuthPrincipal = payload["principal"]
        submission = self._require_reviewable(submission_id, principal)
        self._store.return_submission(
            submission=submission,
            feedback=payload.get("feedback"),
            returned_by=principal.user_id,
        )

    def _mark_late_item(self, submission_id: str, payload: Mapping[str, Any]) -> None:
        principal: AuthPrincipal = payload["principal"]
        submission = self._require_reviewable(submission_id, principal)
        self._store.mark_submission_late(
            submission=submission,
            penalty=payload.get("penalty", 0.0),
            marked_by=principal.user_id,
        )

    def _check_plagiarism_item(self, submission_id: str, payload: Mapping[str, Any]) -> None:
        principal: AuthPrincipal = payload["principal"]
        submission = self._require_reviewable(submission_id, principal)
        self._store.record_plagiarism_check(
            submission=submission,
            similarity_score=payload["similarityScore"],
            report_url=payload.get("reportUrl"),
            checked_by=principal.user_id,
        )

    def _verify_item(self, submission_id: str, payload: Mapping[str, Any]) -> None:
        principal: AuthPrincipal = payload["principal"]
        submission = self._require_reviewable(submission_id, principal)
        self._store.verify_submission(
            submission=submission,
            verified_by=principal.user_id,
            notes=payload.get("notes"),
        )

    def _delete_item(self, submission_id: str, payload: Mapping[str, Any]) -> None:
        submission = self._require_reviewable(submission_id, payload["principal"])
        self._store.delete_submission(submission.id)

    def _require_reviewable(self, submission_id: str, principal: AuthPrincipal) -> SubmissionRecord:
        ref = self._store.get_resource_ref(ResourceKind.SUBMISSION, submission_id)
        if ref is None:
            raise not_found("Submission not found")
        if not evaluate(AccessContext(principal=principal, resource=ref), _teaches_assignment).allowed:
            raise ApiError(status_code=403, code="FORBIDDEN", message="Access denied")

        submission = self._store.get_submission(submission_id)
        if submission is None:
            raise not_found("Submission not found")
        return submission
