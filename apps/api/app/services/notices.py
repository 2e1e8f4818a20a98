"""Notice service layer."""

from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.authorization import AccessContext, evaluate, ownership_guard
from app.domain.bulk import BulkExecutor, bulk_request
from app.domain.ownership import ResourceKind
from app.errors import ApiError, not_found
from app.repositories.memory import InMemoryStore, NoticeRecord
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.notice import NoticeAction, NoticeStatus

_is_author = ownership_guard("owner_id")

_ACTION_UPDATES: dict[NoticeAction, dict[str, Any]] = {
    NoticeAction.PUBLISH: {"status": NoticeStatus.PUBLISHED},
    NoticeAction.ARCHIVE: {"status": NoticeStatus.ARCHIVED},
    NoticeAction.PIN: {"pinned": True},
    NoticeAction.UNPIN: {"pinned": False},
    NoticeAction.FEATURE: {"featured": True},
    NoticeAction.UNFEATURE: {"featured": False},
}


class NoticeService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._executor: BulkExecutor[NoticeAction] = BulkExecutor(
            resource="notice",
            ids_field="noticeIds",
            handlers={action: self._action_handler(action) for action in NoticeAction},
        )

    def bulk_operation(
        self,
        *,
        principal: AuthPrincipal,
        action: NoticeAction,
        notice_ids: Sequence[str],
    ) -> BulkOperationResult:
        return self._executor.run(bulk_request(action, notice_ids, {"principal": principal}))

    def _action_handler(self, action: NoticeAction):
        updates = _ACTION_UPDATES[action]

        def _handler(notice_id: str, payload: Mapping[str, Any]) -> None:
            principal: AuthPrincipal = payload["principal"]
            notice = self._require_modifiable(notice_id, principal)
            self._store.update_notice(notice=notice, modified_by=principal.user_id, **updates)

        return _handler

    def _require_modifiable(self, notice_id: str, principal: AuthPrincipal) -> NoticeRecord:
        ref = self._store.get_resource_ref(ResourceKind.NOTICE, notice_id)
        if ref is None:
            raise not_found("Notice not found")
        if not evaluate(AccessContext(principal=principal, resource=ref), _is_author).allowed:
            raise ApiError(status_code=403, code="FORBIDDEN", message="Access denied")

        notice = self._store.get_notice(notice_id)
        if notice is None:
            raise not_found("Notice not found")
        return notice
