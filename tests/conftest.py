"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (APP_ENV=test -> in-memory store)
  - Provide a frozen clock, an isolated in-memory store and wired use cases
  - Provide small factories for seeded roles, users, payments and expenses

Collaborators:
  - pytest: Test framework
  - clubfunds.infrastructure.repositories.in_memory: the store under test
  - clubfunds.application.usecases: the public operations

Notes:
  - Every test gets its own InMemoryDatabase (function scope)
  - Use cases are built directly here; API tests go through the container
"""

import os
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

os.environ["APP_ENV"] = "test"

from clubfunds.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from clubfunds.application.audit_trail import AuditTrailLogger  # noqa: E402
from clubfunds.application.bootstrap import SystemBootstrapper  # noqa: E402
from clubfunds.application.usecases.audit import ListAuditEntriesUseCase  # noqa: E402
from clubfunds.application.usecases.expenses import (  # noqa: E402
    ApproveExpenseUseCase,
    CreateExpenseInput,
    CreateExpenseUseCase,
    DeleteExpenseUseCase,
    GetExpenseUseCase,
    ListExpensesUseCase,
    UpdateExpenseUseCase,
)
from clubfunds.application.usecases.payments import (  # noqa: E402
    CancelPaymentUseCase,
    CreatePaymentInput,
    CreatePaymentUseCase,
    GetPaymentUseCase,
    ListPaymentsUseCase,
    RejectPaymentUseCase,
    VerifyPaymentUseCase,
)
from clubfunds.application.usecases.roles import (  # noqa: E402
    ActivateRoleUseCase,
    AssignRolesUseCase,
    AssignRoleUseCase,
    CreateRoleUseCase,
    DeactivateRoleUseCase,
    DeleteRoleUseCase,
    GetRoleUseCase,
    ListActiveRolesUseCase,
    ListRolesUseCase,
    ListUsersForRoleUseCase,
    ReactivateRoleUseCase,
    RevokeRoleUseCase,
    UpdateRoleUseCase,
)
from clubfunds.application.usecases.users import (  # noqa: E402
    ChangePasswordUseCase,
    DisableUserUseCase,
    EnableUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    RegisterUserInput,
    RegisterUserUseCase,
)
from clubfunds.domain.entities import (  # noqa: E402
    Actor,
    ExpenseCategory,
    SystemRole,
    User,
)
from clubfunds.infrastructure.repositories.in_memory import (  # noqa: E402
    InMemoryUnitOfWorkFactory,
)
from support import FrozenClock, actor_for  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Infrastructure fixtures
# ============================================================================


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def uow_factory() -> InMemoryUnitOfWorkFactory:
    return InMemoryUnitOfWorkFactory()


@pytest.fixture
def audit_logger(clock: FrozenClock) -> AuditTrailLogger:
    return AuditTrailLogger(clock)


@pytest.fixture
def uc(uow_factory, clock, audit_logger) -> SimpleNamespace:
    """Every public operation wired on the same store and clock."""
    args = (uow_factory, clock, audit_logger)
    return SimpleNamespace(
        assign_role=AssignRoleUseCase(*args),
        assign_roles=AssignRolesUseCase(*args),
        revoke_role=RevokeRoleUseCase(*args),
        reactivate_role=ReactivateRoleUseCase(*args),
        list_active_roles=ListActiveRolesUseCase(uow_factory),
        list_users_for_role=ListUsersForRoleUseCase(uow_factory),
        create_role=CreateRoleUseCase(*args),
        update_role=UpdateRoleUseCase(*args),
        activate_role=ActivateRoleUseCase(*args),
        deactivate_role=DeactivateRoleUseCase(*args),
        delete_role=DeleteRoleUseCase(*args),
        get_role=GetRoleUseCase(uow_factory),
        list_roles=ListRolesUseCase(uow_factory),
        register_user=RegisterUserUseCase(*args),
        get_user=GetUserUseCase(uow_factory),
        list_users=ListUsersUseCase(uow_factory),
        enable_user=EnableUserUseCase(*args),
        disable_user=DisableUserUseCase(*args),
        change_password=ChangePasswordUseCase(
            *args, lambda raw, hashed: hashed == f"hashed:{raw}"
        ),
        create_payment=CreatePaymentUseCase(*args),
        verify_payment=VerifyPaymentUseCase(*args),
        reject_payment=RejectPaymentUseCase(*args),
        cancel_payment=CancelPaymentUseCase(*args),
        get_payment=GetPaymentUseCase(uow_factory),
        list_payments=ListPaymentsUseCase(uow_factory),
        create_expense=CreateExpenseUseCase(*args),
        update_expense=UpdateExpenseUseCase(*args),
        delete_expense=DeleteExpenseUseCase(*args),
        approve_expense=ApproveExpenseUseCase(*args),
        get_expense=GetExpenseUseCase(uow_factory),
        list_expenses=ListExpensesUseCase(uow_factory),
        list_audit=ListAuditEntriesUseCase(uow_factory),
    )


@pytest.fixture
def bootstrapper(uow_factory, uc) -> SystemBootstrapper:
    return SystemBootstrapper(
        uow_factory, uc.create_role, uc.register_user, lambda raw: f"hashed:{raw}"
    )


# ============================================================================
# Seeded data
# ============================================================================


@pytest.fixture
def system_roles(bootstrapper, uow_factory) -> dict:
    """The four system roles, keyed by name."""
    bootstrapper.seed_system_roles()
    with uow_factory() as uow:
        return {role.value: uow.roles.get_by_name(role.value) for role in SystemRole}


@pytest.fixture
def make_user(uc, system_roles):
    """Register a user (default role USER) and return the stored User."""

    def _make(
        username: str | None = None,
        *,
        roles: list[str] | None = None,
        actor: Actor | None = None,
    ) -> User:
        username = username or f"user{uuid4().hex[:8]}"
        role_ids = [system_roles[name].id for name in roles or []]
        result = uc.register_user.execute(
            RegisterUserInput(
                email=f"{username}@club.example.org",
                username=username,
                password_hash="hashed:secret",
                first_name=username.title(),
                last_name="Member",
                role_ids=role_ids,
            ),
            actor or Actor.system(),
        )
        assert result.success, result.message
        return result.payload

    return _make


@pytest.fixture
def fin_admin(make_user) -> User:
    return make_user("treasurer", roles=[SystemRole.FIN_ADMIN.value])


@pytest.fixture
def member(make_user) -> User:
    return make_user("member")


@pytest.fixture
def make_payment(uc, fin_admin):
    def _make(owner: User, reference: str | None = None, amount: str = "150.00"):
        result = uc.create_payment.execute(
            CreatePaymentInput(
                user_id=owner.id,
                amount=Decimal(amount),
                reference=reference or f"REF-{uuid4().hex[:10]}",
                bank_name="Club Bank",
            ),
            actor_for(owner),
        )
        assert result.success, result.message
        return result.payload

    return _make


@pytest.fixture
def make_expense(uc, fin_admin):
    def _make(
        title: str = "Annual dinner venue",
        amount: str = "820.50",
        category: ExpenseCategory = ExpenseCategory.EVENTS,
        vendor: str | None = "Grand Hall Ltd",
    ):
        result = uc.create_expense.execute(
            CreateExpenseInput(
                title=title,
                amount=Decimal(amount),
                category=category,
                vendor=vendor,
            ),
            actor_for(fin_admin),
        )
        assert result.success, result.message
        return result.payload

    return _make
