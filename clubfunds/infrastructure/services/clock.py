"""
Name: System Clock

Responsibilities:
  - Production implementation of domain.services.Clock (UTC, tz-aware)
"""

from __future__ import annotations

from datetime import datetime, timezone


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
