from __future__ import annotations

from datetime import date, datetime, timedelta

import pytz

from ..core.constants import DEFAULT_FACILITY_TIMEZONE, DISPLAY_TIME_FORMAT


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def format_display_time(value: datetime) -> str:
    """Guardian-facing time, e.g. ``09:00 AM``."""
    return value.strftime(DISPLAY_TIME_FORMAT)


class FacilityClock:
    """Current time in the facility's timezone, not the scanning device's.

    Injected into services so tests can supply a fixed clock instead.
    """

    def __init__(self, timezone_name: str = DEFAULT_FACILITY_TIMEZONE):
        self._tz = pytz.timezone(timezone_name)

    @property
    def timezone(self):
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)

    def today(self) -> date:
        return self.now().date()
