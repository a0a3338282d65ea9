"""
===============================================================================
TARJETA CRC - schemas/common.py
===============================================================================

Responsibilities:
    - Success envelope shared by every endpoint: {success, message, data}.
    - Paginated list payload and the audited-row metadata DTO.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from clubfunds.domain.entities import AuditedRecord, Page
from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: T | None = None


class PageRes(BaseModel, Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int
    next_offset: int | None = None


class RecordMetaRes(BaseModel):
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None
    version: int = 0


def to_meta_res(meta: AuditedRecord) -> RecordMetaRes:
    return RecordMetaRes(
        created_at=meta.created_at,
        updated_at=meta.updated_at,
        created_by=meta.created_by,
        updated_by=meta.updated_by,
        version=meta.version,
    )


def to_page_res(page: Page, items: list) -> dict:
    """Page -> PageRes kwargs with already-mapped items."""
    return {
        "items": items,
        "total": page.total,
        "limit": page.limit,
        "offset": page.offset,
        "next_offset": page.next_offset,
    }
