"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Expose the finance policy switches (payment guards, audit attribution)

Collaborators:
  - api/main.py: reads settings for CORS, pool and startup seeding
  - container.py: picks the store and wires policies into use cases
  - identity/: JWT and lockout parameters

Constraints:
  - Lives in the infrastructure layer, NOT in domain/application
  - No business logic, pure configuration

Notes:
  - Singleton via lru_cache; tests call get_settings.cache_clear()
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

IN_MEMORY_ENVS = frozenset({"test", "testing", "ci"})


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string (required outside tests)
        app_env: development | production | test | testing | ci
        allowed_origins: Comma-separated CORS origins
        log_level / log_json: Logger configuration
        jwt_secret / jwt_access_ttl_minutes: Access token signing
        payment_guard_policy: strict (only PENDING transitions) | legacy
        payment_audit_attribution: actor | owner
        max_failed_logins / account_lock_minutes: Login lockout policy
        default_page_size / max_page_size: Listing limits
        seed_system_roles: Create the four system roles at startup
        seed_admin*: Optional bootstrap super administrator
    """

    database_url: str = ""

    # Environment
    app_env: str = "development"

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Observability
    metrics_enabled: bool = True

    # Security - JWT Auth
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = 30

    # Security - login lockout
    max_failed_logins: int = 5
    account_lock_minutes: int = 60

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Finance policies
    payment_guard_policy: str = "strict"
    payment_audit_attribution: str = "actor"

    # Listings
    default_page_size: int = 50
    max_page_size: int = 200

    # Bootstrap
    seed_system_roles: bool = True
    seed_admin: bool = False
    seed_admin_email: str = "superadmin@commonwealth.local"
    seed_admin_username: str = "superadmin"
    seed_admin_password: str = "admin"

    @field_validator("payment_guard_policy")
    @classmethod
    def payment_guard_policy_valid(cls, v: str) -> str:
        mode = (v or "strict").strip().lower()
        if mode not in {"strict", "legacy"}:
            raise ValueError("payment_guard_policy must be strict or legacy")
        return mode

    @field_validator("payment_audit_attribution")
    @classmethod
    def payment_audit_attribution_valid(cls, v: str) -> str:
        mode = (v or "actor").strip().lower()
        if mode not in {"actor", "owner"}:
            raise ValueError("payment_audit_attribution must be actor or owner")
        return mode

    @field_validator("max_failed_logins", "account_lock_minutes", "default_page_size")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_page_sizes(self):
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must be <= max_page_size")
        return self

    @model_validator(mode="after")
    def validate_database_url(self):
        if not self.uses_in_memory_store() and not self.database_url.strip():
            raise ValueError("DATABASE_URL is required outside test environments")
        return self

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        insecure_secrets = {"dev-secret", "changeme", "change-me", "password"}
        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in insecure_secrets:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        if self.seed_admin and self.seed_admin_password in insecure_secrets | {"admin"}:
            raise ValueError("SEED_ADMIN_PASSWORD must not be a default in production")
        return self

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def uses_in_memory_store(self) -> bool:
        return self.app_env.strip().lower() in IN_MEMORY_ENVS

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
