"""
Temporal bucketing of ideas by creation time.

Keys are derived from the calendar date of created_at exactly as stored; no
timezone conversion happens here.

Week labels come in two flavours:

- legacy: week = ceil((day_of_year_zero_based + jan1_weekday + 1) / 7), with
  jan1_weekday counted from Sunday = 0. This is what existing dashboards are
  keyed by. It is not ISO-8601: weeks start on Sunday, late-December dates
  can land in week 53 or 54, and early January is always week 01 of the
  calendar year.
- iso: strict ISO-8601 (Monday weeks, ISO week-year).
"""

import calendar
import math
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ideavault.models.idea import Idea

PERIODS = ("day", "week", "month")
WEEK_NUMBERINGS = ("legacy", "iso")

DateLike = Union[date, datetime]


def _sunday_index(d: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6."""
    return (d.weekday() + 1) % 7


def day_key(ts: DateLike) -> str:
    """Return "YYYY-MM-DD" for the timestamp's own calendar date."""
    return f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"


def week_key(ts: DateLike) -> str:
    """Return the legacy "YYYY-W##" week label."""
    d = ts.date() if isinstance(ts, datetime) else ts
    jan1 = date(d.year, 1, 1)
    day_of_year = (d - jan1).days
    week = math.ceil((day_of_year + _sunday_index(jan1) + 1) / 7)
    return f"{d.year}-W{week:02d}"


def iso_week_key(ts: DateLike) -> str:
    """Return the ISO-8601 "YYYY-W##" label (ISO week-year)."""
    iso_year, iso_week, _ = ts.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def month_key(ts: DateLike) -> str:
    """Return "YYYY-MM"."""
    return f"{ts.year:04d}-{ts.month:02d}"


def period_key(ts: DateLike, period: str, week_numbering: str = "legacy") -> str:
    """
    Key a timestamp by day, week or month.

    Raises:
        ValueError: If period or week_numbering is not recognized.
    """
    if period == "day":
        return day_key(ts)
    if period == "week":
        if week_numbering == "legacy":
            return week_key(ts)
        if week_numbering == "iso":
            return iso_week_key(ts)
        raise ValueError(f"Unknown week numbering: {week_numbering!r}")
    if period == "month":
        return month_key(ts)
    raise ValueError(f"Unknown period: {period!r}")


def count_by_period(
    ideas: Iterable[Idea],
    period: str = "day",
    week_numbering: str = "legacy",
) -> List[Tuple[str, int]]:
    """
    Count ideas per period key.

    Returns:
        (key, count) pairs with keys ascending.
    """
    counts: Dict[str, int] = {}
    for idea in ideas:
        key = period_key(idea.created_at, period, week_numbering)
        counts[key] = counts.get(key, 0) + 1
    return sorted(counts.items())


def group_by_day(ideas: Iterable[Idea]) -> Dict[str, List[Idea]]:
    """
    Partition ideas by day_key of created_at.

    Within a bucket ideas keep their input order.
    """
    groups: Dict[str, List[Idea]] = {}
    for idea in ideas:
        groups.setdefault(day_key(idea.created_at), []).append(idea)
    return groups


def _check_month(month_index: int) -> None:
    if not 0 <= month_index <= 11:
        raise ValueError(f"month index must be 0-11, got {month_index}")


def days_in_month(year: int, month_index: int) -> List[date]:
    """
    Every date of a month, ascending.

    Args:
        year: Four-digit year.
        month_index: Zero-based month (0 = January).
    """
    _check_month(month_index)
    _, count = calendar.monthrange(year, month_index + 1)
    return [date(year, month_index + 1, day) for day in range(1, count + 1)]


def calendar_grid(year: int, month_index: int) -> List[List[Optional[date]]]:
    """
    Lay a month out in Sunday-first weeks of seven cells.

    The first day sits at the column of its weekday (0 = Sunday); cells before
    it and after the last day are None.
    """
    days = days_in_month(year, month_index)
    cells: List[Optional[date]] = [None] * _sunday_index(days[0]) + list(days)
    cells += [None] * (-len(cells) % 7)
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


def shift_month(year: int, month_index: int, delta: int) -> Tuple[int, int]:
    """Move by delta months, rolling the year over as needed."""
    _check_month(month_index)
    total = year * 12 + month_index + delta
    return total // 12, total % 12


def month_title(year: int, month_index: int) -> str:
    """Return e.g. "March 2024"."""
    _check_month(month_index)
    return f"{calendar.month_name[month_index + 1]} {year}"

