"""
Filtering and aggregation over an in-memory idea collection.

Every function here is pure and never raises on well-typed input: ideas with
an UNKNOWN mood or status are simply left out of the matching buckets.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from ideavault.models.idea import KNOWN_MOODS, KNOWN_STATUSES, Idea, Mood, Status

# Status filter values accepted by the list view
STATUS_FILTERS = ("all", "open", "completed", "discarded")


def filter_by_status_and_favorite(
    ideas: Sequence[Idea],
    status_filter: Union[str, Status] = "all",
    favorite_only: bool = False,
) -> List[Idea]:
    """
    Keep ideas matching a status filter and, optionally, only favorites.

    Args:
        ideas: Ideas in display order.
        status_filter: "all" or one of the known status values. Any other
            value matches nothing.
        favorite_only: If True, additionally require favorite == True.

    Returns:
        Matching ideas in their original order.
    """
    if isinstance(status_filter, Status):
        status_filter = status_filter.value

    result = []
    for idea in ideas:
        if status_filter != "all" and (
            idea.status not in KNOWN_STATUSES or idea.status.value != status_filter
        ):
            continue
        if favorite_only and not idea.favorite:
            continue
        result.append(idea)
    return result


def count_by_mood(ideas: Iterable[Idea]) -> Dict[Mood, int]:
    """
    Count ideas per known mood.

    All four buckets are present even when zero; UNKNOWN moods are skipped.
    """
    counts = {mood: 0 for mood in KNOWN_MOODS}
    for idea in ideas:
        if idea.mood in counts:
            counts[idea.mood] += 1
    return counts


def count_by_tag(ideas: Iterable[Idea]) -> Dict[str, int]:
    """
    Count ideas per tag.

    Keys appear in order of first appearance. A tag repeated on one idea
    counts once; ideas without tags contribute nothing.
    """
    counts: Dict[str, int] = {}
    for idea in ideas:
        for tag in dict.fromkeys(idea.tags or []):
            counts[tag] = counts.get(tag, 0) + 1
    return counts


def sorted_tag_counts(counts: Dict[str, int]) -> List[Tuple[str, int]]:
    """Order tag counts by count descending; ties keep first-appearance order."""
    return sorted(counts.items(), key=lambda item: -item[1])


@dataclass
class StatusCounts:
    """Three-way tally of idea statuses."""
    open: int = 0
    completed: int = 0
    discarded: int = 0

    @property
    def total(self) -> int:
        return self.open + self.completed + self.discarded

    def as_dict(self) -> Dict[str, int]:
        return {
            "open": self.open,
            "completed": self.completed,
            "discarded": self.discarded,
        }

    def percentages(self) -> Dict[str, float]:
        """
        Share of each status in percent.

        Every bucket is 0.0 when there are no counted ideas.
        """
        total = self.total
        return {
            name: (count / total * 100) if total > 0 else 0.0
            for name, count in self.as_dict().items()
        }


def count_by_status(ideas: Iterable[Idea]) -> StatusCounts:
    """Tally open/completed/discarded; UNKNOWN statuses are not counted."""
    counts = StatusCounts()
    for idea in ideas:
        if idea.status is Status.OPEN:
            counts.open += 1
        elif idea.status is Status.COMPLETED:
            counts.completed += 1
        elif idea.status is Status.DISCARDED:
            counts.discarded += 1
    return counts
