from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock pinned to a given instant; ``advance`` moves it forward."""

    def __init__(self, at: datetime):
        self._now = at if at.tzinfo else at.replace(tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, **delta: float) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now
