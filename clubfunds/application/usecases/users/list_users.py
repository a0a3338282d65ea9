"""
Name: List Users (identity directory)

Responsibilities:
  - Page through non-deleted users ordered by username
  - Optional case-insensitive search over first/last name, email, username
"""

from __future__ import annotations

from ....domain.entities import Page
from ....domain.repositories import UnitOfWorkFactory
from ..lookups import clamp_page
from ..results import OperationResult, guarded_operation


class ListUsersUseCase:
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

    @guarded_operation("list_users")
    def execute(
        self,
        *,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OperationResult[Page]:
        limit, offset = clamp_page(
            limit, offset, default=self._default_page_size, maximum=self._max_page_size
        )
        term = (search or "").strip() or None
        with self._uow_factory() as uow:
            users, total = uow.users.list_users(search=term, limit=limit, offset=offset)
        return OperationResult.ok(
            Page(items=users, total=total, limit=limit, offset=offset),
            f"{total} users",
        )
