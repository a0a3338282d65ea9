"""
Name: Domain Service Interfaces

Responsibilities:
  - Define ports for collaborators the core consumes but does not own

Collaborators:
  - infrastructure.services.clock: SystemClock implementation
  - tests: frozen clocks for deterministic timestamps

Constraints:
  - Protocols only
"""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """R: Single injected source of "now" (timezone-aware UTC)."""

    def now(self) -> datetime: ...
