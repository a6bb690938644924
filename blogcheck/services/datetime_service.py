"""Datetime parsing: lax input -> strict output."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pendulum


def parse_datetime(value: str | date | datetime, default_tz: str = "UTC") -> datetime:
    """Parse a lax date value into a timezone-aware datetime.

    Accepts what YAML front matter produces:
    - ``datetime`` objects (naive ones get default_tz)
    - ``date`` objects (midnight in default_tz)
    - strings such as 2026-02-02, 2026-02-02 22:21, 2026-02-02T22:21:29+02:00

    Raises ValueError if the value is not a date or is out of range.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            tz = pendulum.timezone(default_tz)
            value = value.replace(tzinfo=tz)  # type: ignore[arg-type]
        return value
    if isinstance(value, date):
        return pendulum.datetime(value.year, value.month, value.day, tz=default_tz)

    value_str = str(value).strip()
    if not value_str:
        raise ValueError("Empty date")

    try:
        parsed = pendulum.parse(value_str, tz=default_tz, strict=False)
    except OverflowError as exc:
        # dateutil overflows on long digit runs such as 99999999999999999999
        raise ValueError(f"Date out of range: {value_str!r}") from exc
    if isinstance(parsed, pendulum.DateTime):
        return parsed
    if isinstance(parsed, pendulum.Date):
        return pendulum.datetime(parsed.year, parsed.month, parsed.day, tz=default_tz)
    # Times and durations parse successfully but are not dates
    raise ValueError(f"Not a calendar date: {value_str!r}")


def format_datetime(dt: datetime) -> str:
    """Format a datetime as RFC 3339 with seconds precision.

    Output: YYYY-MM-DDTHH:MM:SS+HH:MM
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat(timespec="seconds")


def now_utc() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def now_in(tz_name: str) -> datetime:
    """Return the current datetime in the named time zone."""
    return now_utc().astimezone(pendulum.timezone(tz_name))  # type: ignore[arg-type]
