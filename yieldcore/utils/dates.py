from __future__ import annotations

import calendar
from datetime import date, datetime, time, timezone

from dateutil.relativedelta import relativedelta

from yieldcore.core.errors import InvalidTimestamp


TimestampLike = str | datetime | date


def parse_timestamp(value: TimestampLike) -> datetime:
    """Normalise an ISO-8601 string, ``datetime`` or ``date`` to an aware UTC datetime.

    Date-only values mean UTC midnight and naive datetimes are taken as UTC.
    Anything else raises ``InvalidTimestamp``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidTimestamp(value)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidTimestamp(value) from exc
    else:
        raise InvalidTimestamp(value)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def add_months(value: datetime, months: int) -> datetime:
    # relativedelta clamps the day to the target month's length (Jan 31 + 1 -> Feb 28/29).
    return value + relativedelta(months=months)


def whole_months_between(start: datetime, end: datetime) -> int:
    if end <= start:
        return 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if add_months(start, months) > end:
        months -= 1
    return max(months, 0)


def month_end(year: int, month: int) -> datetime:
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, last_day, tzinfo=timezone.utc)


def trailing_month_ends(as_of: datetime, count: int) -> list[datetime]:
    """Month-ends of the ``count`` calendar months preceding ``as_of``'s month, oldest first."""
    anchor = as_of.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    points: list[datetime] = []
    for offset in range(count, 0, -1):
        month_start = anchor - relativedelta(months=offset)
        points.append(month_end(month_start.year, month_start.month))
    return points
