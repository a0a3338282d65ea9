"""
TARJETA CRC - routers/audit.py

Read-only audit trail listing, filterable by acting user, module and action.
"""

from __future__ import annotations

from uuid import UUID

from clubfunds.application.usecases.audit import ListAuditEntriesUseCase
from clubfunds.container import get_list_audit_entries_use_case
from clubfunds.identity.principal import Principal
from clubfunds.identity.rbac import Permission
from fastapi import APIRouter, Depends, Query

from ..dependencies import require_permission
from ..error_mapping import unwrap
from ..schemas.audit import AuditEntryRes, to_audit_entry_res
from ..schemas.common import Envelope, PageRes, to_page_res

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=Envelope[PageRes[AuditEntryRes]])
def list_audit_entries(
    user_id: UUID | None = Query(None),
    module: str | None = Query(None, max_length=50),
    action: str | None = Query(None, max_length=50),
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
    use_case: ListAuditEntriesUseCase = Depends(get_list_audit_entries_use_case),
    _principal: Principal = Depends(require_permission(Permission.AUDIT_READ)),
):
    result = use_case.execute(
        user_id=user_id, module=module, action=action, limit=limit, offset=offset
    )
    page = unwrap(result)
    return Envelope(
        message=result.message,
        data=PageRes[AuditEntryRes](
            **to_page_res(page, [to_audit_entry_res(e) for e in page.items])
        ),
    )
