"""Name: Get User (identity directory read)."""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import User
from ....domain.repositories import UnitOfWorkFactory
from ..lookups import require_user
from ..results import OperationResult, guarded_operation


class GetUserUseCase:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @guarded_operation("get_user")
    def execute(self, user_id: UUID) -> OperationResult[User]:
        with self._uow_factory() as uow:
            user = require_user(uow, user_id)
        return OperationResult.ok(user, "User found")
