"""
===============================================================================
TARJETA CRC - application/audit_trail.py (Audit Trail Logger)
===============================================================================

Responsibilities:
  - Append one AuditEntry per committed state transition.
  - Resolve the actor user id to an existing user before appending.
  - Degrade instead of failing: a lost audit entry is logged and counted,
    and never rolls back the caller's transition.

Collaborators:
  - domain.repositories.UnitOfWork (users + audit repositories)
  - domain.services.Clock
  - crosscutting.metrics.record_audit_write_failure

Constraints:
  - Runs inside the caller's unit of work: in the default path the mutation
    and its entry commit together.
  - The actor lookup and the append share one audit_scope(), so a failure
    in either cannot abort the surrounding transaction (PostgreSQL uses a
    SAVEPOINT).
===============================================================================
"""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

from ..crosscutting.metrics import record_audit_write_failure
from ..domain.audit import AuditAction, AuditEntry, AuditModule
from ..domain.entities import Actor
from ..domain.repositories import UnitOfWork
from ..domain.services import Clock

logger = logging.getLogger(__name__)


def attributed_user_id(actor: Actor, fallback_user_id: UUID | None) -> UUID | None:
    """Acting user when known, otherwise the subject of the operation."""
    return actor.user_id or fallback_user_id


class AuditTrailLogger:
    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    def log(
        self,
        uow: UnitOfWork,
        *,
        actor_user_id: UUID | None,
        action: AuditAction | str,
        module: AuditModule | str,
        description: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditEntry | None:
        action_code = getattr(action, "value", action)
        module_tag = getattr(module, "value", module)
        context = {
            "audit_action": action_code,
            "audit_module": module_tag,
            "actor_user_id": str(actor_user_id) if actor_user_id else None,
            "audit_description": description,
        }

        if actor_user_id is None:
            self._report_loss("Audit entry dropped: no actor user", context)
            return None

        try:
            with uow.audit.audit_scope():
                actor = uow.users.get_by_id(actor_user_id)
                if actor is None:
                    self._report_loss("Audit entry dropped: actor user not found", context)
                    return None

                entry = AuditEntry(
                    id=uuid4(),
                    actor_user_id=actor.id,
                    actor_email=actor.email,
                    action=action_code,
                    module=module_tag,
                    description=description,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    created_at=self._clock.now(),
                )
                uow.audit.append(entry)
            return entry
        except Exception:
            # Best-effort: the primary transition must survive a lost entry.
            self._report_loss("Audit entry could not be written", context, exc_info=True)
            return None

    @staticmethod
    def _report_loss(message: str, context: dict, *, exc_info: bool = False) -> None:
        logger.error(message, exc_info=exc_info, extra=context)
        record_audit_write_failure(str(context.get("audit_module") or "unknown"))
