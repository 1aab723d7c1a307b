from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_BUSINESS_TIMEZONE, DEFAULT_LATE_CLOSE_HOUR
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


@dataclass(frozen=True)
class BusinessClock:
    """Single source of "now" and "today" for the attendance flow.

    Timestamps are stored as naive wall-clock values in the business timezone,
    so every component must go through this clock instead of calling
    ``datetime.now()`` directly. Tests subclass it with a fixed ``now()``.
    """

    timezone: str = DEFAULT_BUSINESS_TIMEZONE

    @property
    def tz(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError:
            raise ValidationError(f"Unknown timezone: {self.timezone}")

    def now(self) -> datetime:
        return datetime.now(self.tz).replace(tzinfo=None, microsecond=0)

    def today(self) -> date:
        return self.now().date()

    def to_local(self, value: datetime) -> datetime:
        """Convert an aware timestamp to naive business time; naive values pass through."""
        if value.tzinfo is None:
            return value
        return value.astimezone(self.tz).replace(tzinfo=None)


def parse_client_datetime(value: str, *, clock: BusinessClock) -> datetime:
    """Parse an ISO-8601 timestamp from a client into naive business time.

    Accepts ``datetime-local`` values (``2026-02-01T20:00``) as well as UTC
    strings with a trailing ``Z``.
    """
    v = (value or "").strip()
    if not v:
        raise ValidationError("Checkout time is required")
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError("Invalid checkout time (expected ISO-8601)")
    return clock.to_local(parsed).replace(microsecond=0)


def default_late_close_time(now: datetime) -> datetime:
    """20:00 on the calendar day before ``now``."""
    yesterday = now.date() - timedelta(days=1)
    return datetime.combine(yesterday, time(DEFAULT_LATE_CLOSE_HOUR, 0))


def format_hhmm(value: datetime | None) -> str:
    return value.strftime("%H:%M") if value else "-"
