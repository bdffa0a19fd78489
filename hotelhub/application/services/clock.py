from __future__ import annotations

from datetime import UTC, datetime

from hotelhub.domain.users.repositories import Clock


class SystemClock(Clock):
    """Wall clock truncated to the persisted resolution (whole seconds)."""

    def now(self) -> datetime:
        return datetime.now(UTC).replace(microsecond=0)
