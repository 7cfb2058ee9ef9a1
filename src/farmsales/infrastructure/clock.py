"""Wall clock at the farm, in its fixed local offset."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from farmsales.domain.model.security import WorkingHours
from farmsales.domain.ports import Clock


class SystemClock(Clock):

    def __init__(self, utc_offset_minutes: int, working_hours: WorkingHours) -> None:
        self._tz = timezone(timedelta(minutes=utc_offset_minutes))
        self._working_hours = working_hours

    def now(self) -> datetime:
        return datetime.now(self._tz)

    @property
    def working_hours(self) -> WorkingHours:
        return self._working_hours
