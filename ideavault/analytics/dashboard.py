"""
Dashboard summary: the numbers behind the analytics charts.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from ideavault.analytics.buckets import count_by_period
from ideavault.analytics.filters import (
    StatusCounts,
    count_by_mood,
    count_by_status,
    count_by_tag,
    sorted_tag_counts,
)
from ideavault.models.idea import Idea, Mood


@dataclass
class MoodRow:
    """One bar of the mood chart."""
    mood: Mood
    count: int
    
    @property
    def icon(self) -> str:
        return self.mood.icon
    
    @property
    def label(self) -> str:
        return self.mood.label


@dataclass
class DashboardSummary:
    """
    Aggregates shown on the dashboard.
    
    Attributes:
        total: Number of ideas considered.
        favorites: Number of favorited ideas.
        period: "day", "week" or "month" for the timeline.
        moods: One row per known mood, zero rows included.
        unrecognized_moods: Ideas whose mood is outside the known set.
        timeline: (period key, count), keys ascending.
        tags: (tag, count), most used first.
        status: Open/completed/discarded tally.
    """
    total: int
    favorites: int
    period: str
    moods: List[MoodRow] = field(default_factory=list)
    unrecognized_moods: int = 0
    timeline: List[Tuple[str, int]] = field(default_factory=list)
    tags: List[Tuple[str, int]] = field(default_factory=list)
    status: StatusCounts = field(default_factory=StatusCounts)
    
    @property
    def max_mood_count(self) -> int:
        return max((row.count for row in self.moods), default=0)
    
    @property
    def max_timeline_count(self) -> int:
        return max((count for _, count in self.timeline), default=0)
    
    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation for the stats API."""
        return {
            "total": self.total,
            "favorites": self.favorites,
            "period": self.period,
            "moods": {row.mood.value: row.count for row in self.moods},
            "unrecognized_moods": self.unrecognized_moods,
            "timeline": [{"key": key, "count": count} for key, count in self.timeline],
            "tags": [{"tag": tag, "count": count} for tag, count in self.tags],
            "status": self.status.as_dict(),
            "status_percentages": self.status.percentages(),
        }


def build_dashboard(
    ideas: Sequence[Idea],
    period: str = "day",
    week_numbering: str = "legacy",
) -> DashboardSummary:
    """
    Compute every dashboard aggregate in one pass over the ideas.
    
    Raises:
        ValueError: If period or week_numbering is not recognized.
    """
    mood_counts = count_by_mood(ideas)
    
    return DashboardSummary(
        total=len(ideas),
        favorites=sum(1 for idea in ideas if idea.favorite),
        period=period,
        moods=[MoodRow(mood=mood, count=count) for mood, count in mood_counts.items()],
        unrecognized_moods=len(ideas) - sum(mood_counts.values()),
        timeline=count_by_period(ideas, period, week_numbering),
        tags=sorted_tag_counts(count_by_tag(ideas)),
        status=count_by_status(ideas),
    )
