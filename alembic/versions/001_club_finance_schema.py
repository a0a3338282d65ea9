"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_club_finance_schema (Alembic Migration)

Responsibilities:
  - Create the full club finance schema from scratch.
  - Enforce at the database level what the core relies on:
      * at most one ACTIVE grant per (user, role) (partial unique index)
      * unique email / username / payment reference
      * unique role name among non-deleted roles
      * positive amounts and known status/category values

Collaborators:
  - PostgreSQL 14+
  - infrastructure/repositories/postgres (uses this schema as its contract)

Policy:
  - Naming convention:
      pk_<table>                         - Primary keys
      uq_<table>_<col>                   - Unique constraints / indexes
      ix_<table>_<col>                   - Indexes
      fk_<table>_<col>__<ref_table>      - Foreign keys
      ck_<table>_<rule>                  - Check constraints
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_club_finance_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PAYMENT_STATUSES = ("PENDING", "VERIFIED", "REJECTED", "CANCELLED")
EXPENSE_CATEGORIES = (
    "EVENTS",
    "WELFARE",
    "ADMINISTRATION",
    "UTILITIES",
    "MAINTENANCE",
    "TRANSPORT",
    "DONATION",
    "OTHER",
)


def _in_list(column: str, values: Sequence[str]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


def _record_columns() -> list[sa.Column]:
    """Row metadata shared by every mutable table (AuditedRecord)."""
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("created_by", sa.String(320), nullable=True),
        sa.Column("updated_by", sa.String(320), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column(
            "is_deleted", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.String(320), nullable=True),
    ]


def upgrade() -> None:
    # =========================================================
    # 1) IDENTITY DIRECTORY (users, roles, user_roles)
    # =========================================================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column(
            "is_enabled", sa.Boolean, nullable=False, server_default=sa.text("true")
        ),
        sa.Column(
            "is_locked", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column(
            "failed_login_attempts",
            sa.Integer,
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_ip", sa.String(45), nullable=True),
        *_record_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "roles",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column(
            "is_active", sa.Boolean, nullable=False, server_default=sa.text("true")
        ),
        sa.Column(
            "is_system_role",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("code", sa.String(60), nullable=True),
        *_record_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_roles"),
    )
    # A deleted role frees its name.
    op.execute(
        "CREATE UNIQUE INDEX uq_roles_name_live ON roles (name) WHERE NOT is_deleted"
    )

    op.create_table(
        "user_roles",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("role_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_by", sa.String(320), nullable=False),
        sa.Column(
            "is_active", sa.Boolean, nullable=False, server_default=sa.text("true")
        ),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_by", sa.String(320), nullable=True),
        sa.Column("remark", sa.String(500), nullable=True),
        *_record_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_user_roles"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_user_roles_user_id__users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["role_id"],
            ["roles.id"],
            name="fk_user_roles_role_id__roles",
            ondelete="RESTRICT",
        ),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])
    op.create_index("ix_user_roles_role_id", "user_roles", ["role_id"])
    # Single active grant per pair; history rows (is_active = false) are unlimited.
    op.execute(
        "CREATE UNIQUE INDEX uq_user_roles_active_pair "
        "ON user_roles (user_id, role_id) WHERE is_active"
    )

    # =========================================================
    # 2) FINANCE (payments, expenses)
    # =========================================================
    op.create_table(
        "payments",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("reference", sa.String(100), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'PENDING'"),
        ),
        sa.Column(
            "is_verified", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("bank_name", sa.String(100), nullable=True),
        sa.Column("account_number", sa.String(50), nullable=True),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("proof_of_payment_url", sa.String(500), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(320), nullable=True),
        sa.Column("verification_remarks", sa.String(500), nullable=True),
        *_record_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_payments"),
        sa.UniqueConstraint("reference", name="uq_payments_reference"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_payments_user_id__users",
            ondelete="RESTRICT",
        ),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        sa.CheckConstraint(
            _in_list("status", PAYMENT_STATUSES), name="ck_payments_status"
        ),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("ix_payments_payment_date", "payments", ["payment_date"])

    op.create_table(
        "expenses",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("expense_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("vendor", sa.String(200), nullable=True),
        sa.Column("receipt_number", sa.String(100), nullable=True),
        sa.Column("receipt_url", sa.String(500), nullable=True),
        sa.Column(
            "is_approved", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(320), nullable=True),
        sa.Column("approved_by_user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("approval_remarks", sa.String(500), nullable=True),
        *_record_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_expenses"),
        sa.ForeignKeyConstraint(
            ["approved_by_user_id"],
            ["users.id"],
            name="fk_expenses_approved_by_user_id__users",
            ondelete="SET NULL",
        ),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        sa.CheckConstraint(
            _in_list("category", EXPENSE_CATEGORIES), name="ck_expenses_category"
        ),
    )
    op.create_index("ix_expenses_category", "expenses", ["category"])
    op.create_index("ix_expenses_expense_date", "expenses", ["expense_date"])

    # =========================================================
    # 3) AUDIT TRAIL (append-only)
    # =========================================================
    op.create_table(
        "audit_trails",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("actor_user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("module", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("actor_email", sa.String(320), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_audit_trails"),
        sa.ForeignKeyConstraint(
            ["actor_user_id"],
            ["users.id"],
            name="fk_audit_trails_actor_user_id__users",
            ondelete="RESTRICT",
        ),
    )
    op.create_index("ix_audit_trails_actor_user_id", "audit_trails", ["actor_user_id"])
    op.create_index("ix_audit_trails_module", "audit_trails", ["module"])
    op.create_index("ix_audit_trails_created_at", "audit_trails", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_trails")
    op.drop_table("expenses")
    op.drop_table("payments")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")
