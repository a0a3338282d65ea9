from .list_audit_entries import ListAuditEntriesUseCase

__all__ = ["ListAuditEntriesUseCase"]
