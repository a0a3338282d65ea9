"""Test helpers shared by unit and integration suites (importable as `support`)."""

from datetime import datetime, timedelta, timezone

from clubfunds.domain.entities import Actor, User

FIXED_NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


def actor_for(user: User, ip_address: str | None = "203.0.113.7") -> Actor:
    return Actor(
        name=user.email,
        user_id=user.id,
        ip_address=ip_address,
        user_agent="pytest",
    )
