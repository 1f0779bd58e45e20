from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

END_OF_DAY = timedelta(hours=23, minutes=59, seconds=59)


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(raw: str) -> tuple[datetime, bool]:
    """Parse an RFC 3339 instant or a YYYY-MM-DD calendar date.

    Returns the UTC instant and whether the input was a bare calendar date
    (in which case the instant is midnight UTC of that day).
    Raises ValueError for anything else.
    """
    value = (raw or "").strip()
    if not value:
        raise ValueError("empty date")

    if _DATE_ONLY.match(value):
        day = date.fromisoformat(value)
        return datetime.combine(day, time.min, tzinfo=timezone.utc), True

    if value[-1] in "Zz":
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    try:
        return to_utc(parsed), False
    except OverflowError as exc:
        # e.g. 9999-12-31T23:59:59-01:00 has no representable UTC instant
        raise ValueError(f"date out of range: {raw!r}") from exc


def parse_range_end(raw: str) -> datetime:
    """Inclusive upper bound: a calendar date extends through 23:59:59 of that day."""
    instant, date_only = parse_instant(raw)
    if date_only:
        return instant + END_OF_DAY
    return instant
