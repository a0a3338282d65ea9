"""
===============================================================================
TARJETA CRC - clubfunds/container.py (Composition Root / manual DI)
===============================================================================

Responsibilities:
  - Compose dependencies (store, clock, audit logger, use cases) following DIP.
  - Expose factories for FastAPI (Depends) and for startup tasks.
  - Keep singletons cached with lru_cache.
  - Centralize runtime decisions based on Settings (in-memory vs PostgreSQL,
    payment policies, page sizes, lockout).

Collaborators:
  - crosscutting.config.get_settings
  - domain.repositories.UnitOfWorkFactory (port)
  - infrastructure.* (implementations)
  - application.usecases.* (use cases)

Notes:
  - No business logic here.
  - No FastAPI imports (only factories).
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.audit_trail import AuditTrailLogger
from .application.bootstrap import SystemBootstrapper
from .application.usecases.audit import ListAuditEntriesUseCase
from .application.usecases.expenses import (
    ApproveExpenseUseCase,
    CreateExpenseUseCase,
    DeleteExpenseUseCase,
    GetExpenseUseCase,
    ListExpensesUseCase,
    UpdateExpenseUseCase,
)
from .application.usecases.payments import (
    CancelPaymentUseCase,
    CreatePaymentUseCase,
    GetPaymentUseCase,
    ListPaymentsUseCase,
    PaymentAuditAttribution,
    RejectPaymentUseCase,
    VerifyPaymentUseCase,
)
from .application.usecases.roles import (
    ActivateRoleUseCase,
    AssignRolesUseCase,
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
from .application.usecases.users import (
    AuthenticateUserUseCase,
    ChangePasswordUseCase,
    DisableUserUseCase,
    EnableUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    RegisterUserUseCase,
)
from .crosscutting.config import get_settings
from .domain.payment_machine import PaymentGuardPolicy
from .domain.repositories import UnitOfWorkFactory
from .domain.services import Clock
from .identity.actor_resolver import CurrentActorResolver
from .identity.auth import hash_password, verify_password
from .infrastructure.repositories.in_memory import InMemoryUnitOfWorkFactory
from .infrastructure.services.clock import SystemClock

# =============================================================================
# Infrastructure
# =============================================================================


@lru_cache(maxsize=1)
def get_uow_factory() -> UnitOfWorkFactory:
    """In-memory store for test environments, PostgreSQL otherwise."""
    if get_settings().uses_in_memory_store():
        return InMemoryUnitOfWorkFactory()

    from .infrastructure.db.pool import get_pool
    from .infrastructure.repositories.postgres import PostgresUnitOfWorkFactory

    return PostgresUnitOfWorkFactory(get_pool)


@lru_cache(maxsize=1)
def get_clock() -> Clock:
    return SystemClock()


@lru_cache(maxsize=1)
def get_audit_trail_logger() -> AuditTrailLogger:
    return AuditTrailLogger(get_clock())


@lru_cache(maxsize=1)
def get_actor_resolver() -> CurrentActorResolver:
    return CurrentActorResolver()


def _page_sizes() -> dict[str, int]:
    settings = get_settings()
    return {
        "default_page_size": settings.default_page_size,
        "max_page_size": settings.max_page_size,
    }


# =============================================================================
# Use cases: roles
# =============================================================================


@lru_cache(maxsize=1)
def get_assign_roles_use_case() -> AssignRolesUseCase:
    return AssignRolesUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_revoke_role_use_case() -> RevokeRoleUseCase:
    return RevokeRoleUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_reactivate_role_use_case() -> ReactivateRoleUseCase:
    return ReactivateRoleUseCase(
        get_uow_factory(), get_clock(), get_audit_trail_logger()
    )


@lru_cache(maxsize=1)
def get_list_active_roles_use_case() -> ListActiveRolesUseCase:
    return ListActiveRolesUseCase(get_uow_factory())


@lru_cache(maxsize=1)
def get_list_users_for_role_use_case() -> ListUsersForRoleUseCase:
    return ListUsersForRoleUseCase(get_uow_factory(), **_page_sizes())


@lru_cache(maxsize=1)
def get_create_role_use_case() -> CreateRoleUseCase:
    return CreateRoleUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_update_role_use_case() -> UpdateRoleUseCase:
    return UpdateRoleUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_activate_role_use_case() -> ActivateRoleUseCase:
    return ActivateRoleUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_deactivate_role_use_case() -> DeactivateRoleUseCase:
    return DeactivateRoleUseCase(
        get_uow_factory(), get_clock(), get_audit_trail_logger()
    )


@lru_cache(maxsize=1)
def get_delete_role_use_case() -> DeleteRoleUseCase:
    return DeleteRoleUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_get_role_use_case() -> GetRoleUseCase:
    return GetRoleUseCase(get_uow_factory())


@lru_cache(maxsize=1)
def get_list_roles_use_case() -> ListRolesUseCase:
    return ListRolesUseCase(get_uow_factory(), **_page_sizes())


# =============================================================================
# Use cases: users
# =============================================================================


@lru_cache(maxsize=1)
def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_get_user_use_case() -> GetUserUseCase:
    return GetUserUseCase(get_uow_factory())


@lru_cache(maxsize=1)
def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase(get_uow_factory(), **_page_sizes())


@lru_cache(maxsize=1)
def get_enable_user_use_case() -> EnableUserUseCase:
    return EnableUserUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_disable_user_use_case() -> DisableUserUseCase:
    return DisableUserUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_change_password_use_case() -> ChangePasswordUseCase:
    return ChangePasswordUseCase(
        get_uow_factory(), get_clock(), get_audit_trail_logger(), verify_password
    )


@lru_cache(maxsize=1)
def get_authenticate_user_use_case() -> AuthenticateUserUseCase:
    settings = get_settings()
    return AuthenticateUserUseCase(
        get_uow_factory(),
        get_clock(),
        verify_password,
        max_failed_logins=settings.max_failed_logins,
        account_lock_minutes=settings.account_lock_minutes,
    )


# =============================================================================
# Use cases: payments
# =============================================================================


def _payment_policies() -> dict[str, object]:
    settings = get_settings()
    return {
        "guard_policy": PaymentGuardPolicy(settings.payment_guard_policy),
        "attribution": PaymentAuditAttribution(settings.payment_audit_attribution),
    }


@lru_cache(maxsize=1)
def get_create_payment_use_case() -> CreatePaymentUseCase:
    return CreatePaymentUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_verify_payment_use_case() -> VerifyPaymentUseCase:
    return VerifyPaymentUseCase(
        get_uow_factory(), get_clock(), get_audit_trail_logger(), **_payment_policies()
    )


@lru_cache(maxsize=1)
def get_reject_payment_use_case() -> RejectPaymentUseCase:
    return RejectPaymentUseCase(
        get_uow_factory(), get_clock(), get_audit_trail_logger(), **_payment_policies()
    )


@lru_cache(maxsize=1)
def get_cancel_payment_use_case() -> CancelPaymentUseCase:
    return CancelPaymentUseCase(
        get_uow_factory(), get_clock(), get_audit_trail_logger(), **_payment_policies()
    )


@lru_cache(maxsize=1)
def get_get_payment_use_case() -> GetPaymentUseCase:
    return GetPaymentUseCase(get_uow_factory())


@lru_cache(maxsize=1)
def get_list_payments_use_case() -> ListPaymentsUseCase:
    return ListPaymentsUseCase(get_uow_factory(), **_page_sizes())


# =============================================================================
# Use cases: expenses
# =============================================================================


@lru_cache(maxsize=1)
def get_create_expense_use_case() -> CreateExpenseUseCase:
    return CreateExpenseUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_update_expense_use_case() -> UpdateExpenseUseCase:
    return UpdateExpenseUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_delete_expense_use_case() -> DeleteExpenseUseCase:
    return DeleteExpenseUseCase(get_uow_factory(), get_clock(), get_audit_trail_logger())


@lru_cache(maxsize=1)
def get_approve_expense_use_case() -> ApproveExpenseUseCase:
    return ApproveExpenseUseCase(
        get_uow_factory(), get_clock(), get_audit_trail_logger()
    )


@lru_cache(maxsize=1)
def get_get_expense_use_case() -> GetExpenseUseCase:
    return GetExpenseUseCase(get_uow_factory())


@lru_cache(maxsize=1)
def get_list_expenses_use_case() -> ListExpensesUseCase:
    return ListExpensesUseCase(get_uow_factory(), **_page_sizes())


# =============================================================================
# Use cases: audit
# =============================================================================


@lru_cache(maxsize=1)
def get_list_audit_entries_use_case() -> ListAuditEntriesUseCase:
    return ListAuditEntriesUseCase(get_uow_factory(), **_page_sizes())


# =============================================================================
# Startup
# =============================================================================


@lru_cache(maxsize=1)
def get_system_bootstrapper() -> SystemBootstrapper:
    return SystemBootstrapper(
        get_uow_factory(),
        get_create_role_use_case(),
        get_register_user_use_case(),
        hash_password,
    )


def reset_container() -> None:
    """Drop every cached singleton (tests / settings reload)."""
    for factory in list(globals().values()):
        cache_clear = getattr(factory, "cache_clear", None)
        if callable(cache_clear) and getattr(factory, "__module__", None) == __name__:
            cache_clear()
