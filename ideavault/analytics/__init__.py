"""
Analytics module.

Pure filters, aggregates and date buckets over an in-memory idea list, plus
the calendar and dashboard view models built from them.
"""

from ideavault.analytics.buckets import (
    PERIODS,
    WEEK_NUMBERINGS,
    calendar_grid,
    count_by_period,
    day_key,
    days_in_month,
    group_by_day,
    iso_week_key,
    month_key,
    month_title,
    period_key,
    shift_month,
    week_key,
)
from ideavault.analytics.calendar_view import DayCell, MonthView, build_month_view
from ideavault.analytics.dashboard import DashboardSummary, MoodRow, build_dashboard
from ideavault.analytics.filters import (
    STATUS_FILTERS,
    StatusCounts,
    count_by_mood,
    count_by_status,
    count_by_tag,
    filter_by_status_and_favorite,
    sorted_tag_counts,
)

__all__ = [
    "PERIODS",
    "WEEK_NUMBERINGS",
    "STATUS_FILTERS",
    "DayCell",
    "MonthView",
    "DashboardSummary",
    "MoodRow",
    "StatusCounts",
    "build_dashboard",
    "build_month_view",
    "calendar_grid",
    "count_by_mood",
    "count_by_period",
    "count_by_status",
    "count_by_tag",
    "day_key",
    "days_in_month",
    "filter_by_status_and_favorite",
    "group_by_day",
    "iso_week_key",
    "month_key",
    "month_title",
    "period_key",
    "shift_month",
    "sorted_tag_counts",
    "week_key",
]
