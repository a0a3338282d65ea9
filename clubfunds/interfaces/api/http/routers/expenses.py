"""
===============================================================================
TARJETA CRC - routers/expenses.py
===============================================================================

Responsibilities:
    - Expense CRUD (soft delete) and approval.
    - Search/filter listings.
    - Forward expected_version for optimistic concurrency (412 on conflict).
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from clubfunds.application.usecases.expenses import (
    ApproveExpenseUseCase,
    CreateExpenseInput,
    CreateExpenseUseCase,
    DeleteExpenseUseCase,
    GetExpenseUseCase,
    ListExpensesUseCase,
    UpdateExpenseUseCase,
)
from clubfunds.container import (
    get_approve_expense_use_case,
    get_create_expense_use_case,
    get_delete_expense_use_case,
    get_get_expense_use_case,
    get_list_expenses_use_case,
    get_update_expense_use_case,
)
from clubfunds.domain.entities import Actor, ExpenseCategory
from clubfunds.domain.expense_machine import ExpenseChanges
from clubfunds.identity.principal import Principal
from clubfunds.identity.rbac import Permission
from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_actor, require_permission
from ..error_mapping import unwrap
from ..schemas.common import Envelope, PageRes, to_page_res
from ..schemas.expenses import (
    ApproveExpenseReq,
    CreateExpenseReq,
    ExpenseRes,
    UpdateExpenseReq,
    to_expense_res,
)

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("", response_model=Envelope[PageRes[ExpenseRes]])
def list_expenses(
    category: ExpenseCategory | None = Query(None),
    is_approved: bool | None = Query(None),
    q: str | None = Query(None, max_length=200, description="Search title/description/vendor"),
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
    use_case: ListExpensesUseCase = Depends(get_list_expenses_use_case),
    _principal: Principal = Depends(require_permission(Permission.EXPENSES_READ)),
):
    result = use_case.execute(
        category=category, is_approved=is_approved, search=q, limit=limit, offset=offset
    )
    page = unwrap(result)
    return Envelope(
        message=result.message,
        data=PageRes[ExpenseRes](
            **to_page_res(page, [to_expense_res(e) for e in page.items])
        ),
    )


@router.post("", response_model=Envelope[ExpenseRes], status_code=status.HTTP_201_CREATED)
def create_expense(
    req: CreateExpenseReq,
    use_case: CreateExpenseUseCase = Depends(get_create_expense_use_case),
    _principal: Principal = Depends(require_permission(Permission.EXPENSES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(
        CreateExpenseInput(
            title=req.title,
            amount=req.amount,
            category=req.category,
            expense_date=req.expense_date,
            description=req.description,
            vendor=req.vendor,
            receipt_number=req.receipt_number,
            receipt_url=req.receipt_url,
        ),
        actor,
    )
    return Envelope(message=result.message, data=to_expense_res(unwrap(result)))


@router.get("/{expense_id}", response_model=Envelope[ExpenseRes])
def get_expense(
    expense_id: UUID,
    use_case: GetExpenseUseCase = Depends(get_get_expense_use_case),
    _principal: Principal = Depends(require_permission(Permission.EXPENSES_READ)),
):
    result = use_case.execute(expense_id)
    return Envelope(message=result.message, data=to_expense_res(unwrap(result)))


@router.put("/{expense_id}", response_model=Envelope[ExpenseRes])
def update_expense(
    expense_id: UUID,
    req: UpdateExpenseReq,
    use_case: UpdateExpenseUseCase = Depends(get_update_expense_use_case),
    _principal: Principal = Depends(require_permission(Permission.EXPENSES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    changes = ExpenseChanges(
        title=req.title,
        description=req.description,
        amount=req.amount,
        category=req.category,
        expense_date=req.expense_date,
        vendor=req.vendor,
        receipt_number=req.receipt_number,
        receipt_url=req.receipt_url,
    )
    result = use_case.execute(
        expense_id, changes, actor, expected_version=req.expected_version
    )
    return Envelope(message=result.message, data=to_expense_res(unwrap(result)))


@router.delete("/{expense_id}", response_model=Envelope[ExpenseRes])
def delete_expense(
    expense_id: UUID,
    use_case: DeleteExpenseUseCase = Depends(get_delete_expense_use_case),
    _principal: Principal = Depends(require_permission(Permission.EXPENSES_MANAGE)),
    actor: Actor = Depends(get_actor),
):
    result = use_case.execute(expense_id, actor)
    return Envelope(message=result.message, data=to_expense_res(unwrap(result)))


@router.post("/{expense_id}/approve", response_model=Envelope[ExpenseRes])
def approve_expense(
    expense_id: UUID,
    req: ApproveExpenseReq | None = None,
    use_case: ApproveExpenseUseCase = Depends(get_approve_expense_use_case),
    _principal: Principal = Depends(require_permission(Permission.EXPENSES_APPROVE)),
    actor: Actor = Depends(get_actor),
):
    remarks = req.remarks if req is not None else None
    result = use_case.execute(expense_id, actor, remarks=remarks)
    return Envelope(message=result.message, data=to_expense_res(unwrap(result)))
