"""Time helpers shared by order listing, bills and the reaper."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_day_window_utc(day: date, utc_offset_minutes: int) -> tuple[datetime, datetime]:
    """Return the UTC boundaries of a business-local calendar day.

    The end boundary is exclusive.
    """
    offset = timedelta(minutes=utc_offset_minutes)
    start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc) - offset
    return start, start + timedelta(days=1)


def next_run_at(now: datetime, minute: int) -> datetime:
    """Return the next wall-clock time strictly after ``now`` at ``minute`` past the hour."""
    candidate = now.replace(minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(hours=1)
    return candidate
