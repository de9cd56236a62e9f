"""
Month calendar view model.

Combines the month grid with the ideas created on each day.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence, Tuple

from ideavault.analytics.buckets import (
    calendar_grid,
    day_key,
    group_by_day,
    month_title,
    shift_month,
)
from ideavault.models.idea import Idea


@dataclass
class DayCell:
    """One day of the calendar and the ideas created on it."""
    date: date
    key: str
    ideas: List[Idea] = field(default_factory=list)
    is_today: bool = False


@dataclass
class MonthView:
    """
    A month laid out Sunday-first.
    
    Attributes:
        year: Displayed year.
        month_index: Displayed month, zero-based.
        title: e.g. "March 2024".
        weeks: Rows of seven cells; None marks a placeholder outside the month.
        prev_month: (year, month_index) of the previous month.
        next_month: (year, month_index) of the next month.
    """
    year: int
    month_index: int
    title: str
    weeks: List[List[Optional[DayCell]]]
    prev_month: Tuple[int, int]
    next_month: Tuple[int, int]
    
    @property
    def idea_count(self) -> int:
        return sum(len(cell.ideas) for week in self.weeks for cell in week if cell)


def build_month_view(
    ideas: Sequence[Idea],
    year: int,
    month_index: int,
    today: date = None,
) -> MonthView:
    """
    Build the calendar for one month.
    
    Args:
        ideas: The user's ideas (any order; each day keeps that order).
        year: Year to show.
        month_index: Zero-based month to show.
        today: Date to highlight. Defaults to date.today().
    """
    today = today or date.today()
    by_day = group_by_day(ideas)
    
    weeks = []
    for row in calendar_grid(year, month_index):
        cells = []
        for day in row:
            if day is None:
                cells.append(None)
                continue
            key = day_key(day)
            cells.append(DayCell(
                date=day,
                key=key,
                ideas=by_day.get(key, []),
                is_today=day == today,
            ))
        weeks.append(cells)
    
    return MonthView(
        year=year,
        month_index=month_index,
        title=month_title(year, month_index),
        weeks=weeks,
        prev_month=shift_month(year, month_index, -1),
        next_month=shift_month(year, month_index, 1),
    )
