"""Schemas for audit trail reads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from clubfunds.domain.audit import AuditEntry
from pydantic import BaseModel


class AuditEntryRes(BaseModel):
    id: UUID
    actor_user_id: UUID
    actor_email: str | None = None
    action: str
    module: str
    description: str
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime


def to_audit_entry_res(entry: AuditEntry) -> AuditEntryRes:
    return AuditEntryRes(
        id=entry.id,
        actor_user_id=entry.actor_user_id,
        actor_email=entry.actor_email,
        action=entry.action,
        module=entry.module,
        description=entry.description,
        ip_address=entry.ip_address,
        user_agent=entry.user_agent,
        created_at=entry.created_at,
    )
