"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize the FastAPI application with metadata (title, version)
  - Configure middleware (CORS, request context)
  - Mount the club finance router under the /v1 prefix and /auth routes
  - Seed system roles (and optionally the super administrator) at startup
  - Expose health check and metrics endpoints

Collaborators:
  - FastAPI: ASGI web framework
  - RequestContextMiddleware: request id, logging context, request metrics
  - interfaces.api.http.router: users, roles, payments, expenses, audit
  - container.get_system_bootstrapper: startup seeding

Constraints:
  - CORS configurable via ALLOWED_ORIGINS (comma-separated)
  - Test environments (APP_ENV=test) run on the in-memory store, no pool

Notes:
  - Middleware order matters: RequestContext -> CORS -> routes
  - /healthz follows the Kubernetes health check convention
  - /metrics exposes Prometheus metrics (METRICS_ENABLED)
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..application.bootstrap import AdminSeed
from ..container import get_system_bootstrapper
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import not_found
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import RequestContextMiddleware
from ..infrastructure.db.pool import close_pool, get_pool, init_pool
from ..interfaces.api.http.router import router
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers


def _seed(settings) -> None:
    bootstrapper = get_system_bootstrapper()
    if settings.seed_system_roles:
        bootstrapper.seed_system_roles()
    if settings.seed_admin:
        bootstrapper.seed_admin(
            AdminSeed(
                email=settings.seed_admin_email,
                username=settings.seed_admin_username,
                password=settings.seed_admin_password,
            )
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Initializes the pool and seeds roles."""
    settings = get_settings()
    in_memory = settings.uses_in_memory_store()

    if not in_memory:
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    try:
        try:
            _seed(settings)
        except Exception as e:
            logger.error("Startup failed", extra={"error": str(e)})
            raise

        logger.info(
            "ClubFunds API starting up",
            extra={
                "app_env": settings.app_env,
                "store": "memory" if in_memory else "postgres",
                "payment_guard_policy": settings.payment_guard_policy,
                "payment_audit_attribution": settings.payment_audit_attribution,
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )

        yield

    finally:
        if not in_memory:
            close_pool()
        logger.info("ClubFunds API shutting down")


def _get_allowed_origins() -> list[str]:
    """CORS origins from settings, with a fallback for import-time errors."""
    try:
        return get_settings().get_allowed_origins_list()
    except ValueError:
        return ["http://localhost:3000"]


app = FastAPI(
    title="ClubFunds API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "auth", "description": "User authentication (JWT)"},
        {"name": "users", "description": "User directory and role grants"},
        {"name": "roles", "description": "Role catalog"},
        {"name": "payments", "description": "Member payments and their review"},
        {"name": "expenses", "description": "Club expenses and approval"},
        {"name": "audit", "description": "Audit trail"},
    ],
)

app.add_middleware(RequestContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
)

app.include_router(router, prefix="/v1")

# Auth routes have no version prefix
app.include_router(auth_router)

register_exception_handlers(app)


def _ping_database() -> bool:
    with get_pool().connection() as conn:
        conn.execute("SELECT 1")
    return True


@app.get("/healthz")
def healthz(request: Request):
    """
    Health check.

    Returns:
        ok: True if the store is reachable
        db: "connected", "disconnected" or "memory"
        request_id: correlation id for this request
    """
    if get_settings().uses_in_memory_store():
        db_status = "memory"
    else:
        db_status = "disconnected"
        try:
            if _ping_database():
                db_status = "connected"
        except Exception as e:
            logger.warning("Health check: DB unavailable", extra={"error": str(e)})

    return {
        "ok": db_status != "disconnected",
        "db": db_status,
        "request_id": getattr(request.state, "request_id", None),
    }


@app.get("/metrics")
def metrics():
    """Prometheus metrics in text format."""
    if not get_settings().metrics_enabled:
        raise not_found("Endpoint", "/metrics")
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)
