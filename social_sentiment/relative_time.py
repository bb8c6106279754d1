from __future__ import annotations

import calendar
import math
from datetime import datetime, timedelta, timezone

_MINUTES_IN_DAY = 1440
_MINUTES_IN_ALMOST_TWO_DAYS = 2520
_MINUTES_IN_MONTH = 43200
_MINUTES_IN_TWO_MONTHS = 86400


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _plural(count: int, one: str, many: str) -> str:
    return one if count == 1 else many.format(count=count)


def _shift_months_back(value: datetime, months: int) -> datetime:
    # Day overflow rolls into the following month: 2023-05-31 minus 3 months is 2023-03-03.
    total = value.year * 12 + (value.month - 1) - months
    year, month0 = divmod(total, 12)
    return value.replace(year=year, month=month0 + 1, day=1) + timedelta(days=value.day - 1)


def _is_last_day_of_month(value: datetime) -> bool:
    return value.day == calendar.monthrange(value.year, value.month)[1]


def _full_months_between(earlier: datetime, later: datetime) -> int:
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if months < 1:
        return 0

    anchor = later
    if later.month == 2 and later.day > 27:
        # Late February counts from the 30th, which lands in early March.
        anchor = later.replace(day=1) + timedelta(days=29)

    not_full = _shift_months_back(anchor, months) < earlier
    if _is_last_day_of_month(later) and months == 1 and later > earlier:
        not_full = False
    return months - int(not_full)


def distance_in_words(earlier: datetime, later: datetime) -> str:
    """Approximate English distance between two instants, with `earlier <= later`."""
    seconds = math.trunc((later - earlier).total_seconds())
    minutes = _round_half_up(seconds / 60)

    if minutes < 2:
        if minutes == 0:
            return "less than a minute"
        return "1 minute"
    if minutes < 45:
        return f"{minutes} minutes"
    if minutes < 90:
        return "about 1 hour"
    if minutes < _MINUTES_IN_DAY:
        hours = _round_half_up(minutes / 60)
        return _plural(hours, "about 1 hour", "about {count} hours")
    if minutes < _MINUTES_IN_ALMOST_TWO_DAYS:
        return "1 day"
    if minutes < _MINUTES_IN_MONTH:
        days = _round_half_up(minutes / _MINUTES_IN_DAY)
        return _plural(days, "1 day", "{count} days")
    if minutes < _MINUTES_IN_TWO_MONTHS:
        months = _round_half_up(minutes / _MINUTES_IN_MONTH)
        return _plural(months, "about 1 month", "about {count} months")

    months = _full_months_between(earlier, later)
    if months < 12:
        nearest = _round_half_up(minutes / _MINUTES_IN_MONTH)
        return _plural(nearest, "1 month", "{count} months")

    remainder = months % 12
    years = months // 12
    if remainder < 3:
        return _plural(years, "about 1 year", "about {count} years")
    if remainder < 9:
        return _plural(years, "over 1 year", "over {count} years")
    return _plural(years + 1, "almost 1 year", "almost {count} years")


def relative_label(when: datetime, now: datetime) -> str:
    """
    Human relative time of `when` as seen from `now`, e.g. "about 3 hours ago".

    Future instants read "in ...". Naive datetimes are treated as UTC.
    """
    w = _as_utc(when)
    n = _as_utc(now)

    if w > n:
        return f"in {distance_in_words(n, w)}"
    return f"{distance_in_words(w, n)} ago"
