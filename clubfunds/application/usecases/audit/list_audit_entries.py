"""
===============================================================================
USE CASE: List Audit Entries
===============================================================================

Responsibilities:
    - Paginated, newest-first reads of the audit trail.
    - Optional filters: user id, module, action (None = no constraint).
    - A user-id filter requires the user to exist (NOT_FOUND otherwise).

Notes:
    - Pure read; never writes an audit entry of its own.
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import Page
from ....domain.repositories import UnitOfWorkFactory
from ..lookups import clamp_page, require_user
from ..results import OperationResult, guarded_operation


def _normalize_tag(value: object | None) -> str | None:
    if value is None:
        return None
    tag = str(getattr(value, "value", value)).strip().upper()
    return tag or None


class ListAuditEntriesUseCase:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        default_page_size: int = 50,
        max_page_size: int = 200,
    ) -> None:
        self._uow_factory = uow_factory
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    @guarded_operation("list_audit_entries")
    def execute(
        self,
        *,
        user_id: UUID | None = None,
        module: str | None = None,
        action: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OperationResult[Page]:
        limit, offset = clamp_page(
            limit, offset, default=self._default_page_size, maximum=self._max_page_size
        )
        with self._uow_factory() as uow:
            if user_id is not None:
                require_user(uow, user_id)
            entries, total = uow.audit.list_entries(
                user_id=user_id,
                module=_normalize_tag(module),
                action=_normalize_tag(action),
                limit=limit,
                offset=offset,
            )
        return OperationResult.ok(
            Page(items=entries, total=total, limit=limit, offset=offset),
            f"{total} audit entries",
        )
