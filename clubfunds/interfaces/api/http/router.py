"""
===============================================================================
TARJETA CRC - router.py (root router / composition)
===============================================================================

Responsibilities:
  - Define the root APIRouter included by FastAPI (app.include_router).
  - Centralize RFC7807 responses for OpenAPI.
  - Compose feature routers (users/roles/payments/expenses/audit).

Notes:
  - Included from api/main.py with prefix="/v1".
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter

from ....crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from .routers.audit import router as audit_router
from .routers.expenses import router as expenses_router
from .routers.payments import router as payments_router
from .routers.roles import router as roles_router
from .routers.users import router as users_router


def build_router() -> APIRouter:
    """Build the v1 root router (no import-time side effects beyond routing)."""
    api_router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)

    api_router.include_router(users_router)
    api_router.include_router(roles_router)
    api_router.include_router(payments_router)
    api_router.include_router(expenses_router)
    api_router.include_router(audit_router)

    return api_router


router = build_router()

__all__ = ["router", "build_router"]
