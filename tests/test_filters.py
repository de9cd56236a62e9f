"""
Tests for filtering and aggregation over an idea collection.

Sample ideas (tests/test_config.py), newest first:
    idea-2  dreamy   completed        tags: music
    idea-1  wild     open      ★      tags: outdoors, diy
    idea-3  playful  discarded        tags: friends, diy
    idea-4  happy    open (null) ★    tags: -
"""

import dataclasses

import pytest

from ideavault.analytics import (
    STATUS_FILTERS,
    StatusCounts,
    count_by_mood,
    count_by_status,
    count_by_tag,
    filter_by_status_and_favorite,
    sorted_tag_counts,
)
from ideavault.models import Mood, Status


def _ids(ideas):
    return [idea.id for idea in ideas]


# =============================================================================
# filter_by_status_and_favorite
# =============================================================================

@pytest.mark.analytics
class TestStatusFavoriteFilter:
    """Tests for the list view filter."""

    def test_all_keeps_everything_in_order(self, sample_ideas):
        result = filter_by_status_and_favorite(sample_ideas, "all", False)
        assert _ids(result) == _ids(sample_ideas)

    def test_status_filter(self, sample_ideas):
        assert _ids(filter_by_status_and_favorite(sample_ideas, "open")) == ["idea-1", "idea-4"]
        assert _ids(filter_by_status_and_favorite(sample_ideas, "completed")) == ["idea-2"]
        assert _ids(filter_by_status_and_favorite(sample_ideas, Status.DISCARDED)) == ["idea-3"]

    def test_favorite_only(self, sample_ideas):
        result = filter_by_status_and_favorite(sample_ideas, "all", True)
        assert _ids(result) == ["idea-1", "idea-4"]

    def test_status_and_favorite_compose(self, sample_ideas):
        result = filter_by_status_and_favorite(sample_ideas, "completed", True)
        assert result == []

    def test_unknown_filter_matches_nothing(self, sample_ideas):
        assert filter_by_status_and_favorite(sample_ideas, "archived") == []

    def test_unknown_status_only_in_all(self, sample_ideas):
        odd = dataclasses.replace(sample_ideas[0], id="odd", status=Status.UNKNOWN)
        ideas = sample_ideas + [odd]

        assert "odd" in _ids(filter_by_status_and_favorite(ideas, "all"))
        for value in STATUS_FILTERS[1:]:
            assert "odd" not in _ids(filter_by_status_and_favorite(ideas, value))
        assert "odd" not in _ids(filter_by_status_and_favorite(ideas, "unknown"))

    def test_does_not_mutate_input(self, sample_ideas):
        before = list(sample_ideas)
        filter_by_status_and_favorite(sample_ideas, "open", True)
        assert sample_ideas == before


# =============================================================================
# Counts
# =============================================================================

@pytest.mark.analytics
class TestCountByMood:
    """Tests for mood counts."""

    def test_one_of_each(self, sample_ideas):
        counts = count_by_mood(sample_ideas)
        assert counts == {Mood.HAPPY: 1, Mood.PLAYFUL: 1, Mood.DREAMY: 1, Mood.WILD: 1}

    def test_empty_has_all_zero_buckets(self):
        assert count_by_mood([]) == {mood: 0 for mood in (Mood.HAPPY, Mood.PLAYFUL, Mood.DREAMY, Mood.WILD)}

    def test_unknown_mood_is_not_counted(self, sample_ideas):
        odd = dataclasses.replace(sample_ideas[0], mood=Mood.UNKNOWN)
        counts = count_by_mood([odd])

        assert Mood.UNKNOWN not in counts
        assert sum(counts.values()) == 0


@pytest.mark.analytics
class TestCountByTag:
    """Tests for tag counts."""

    def test_counts_and_first_appearance_order(self, sample_ideas):
        counts = count_by_tag(sample_ideas)

        assert counts == {"music": 1, "outdoors": 1, "diy": 2, "friends": 1}
        assert list(counts) == ["music", "outdoors", "diy", "friends"]

    def test_repeated_tag_on_one_idea_counts_once(self, sample_ideas):
        doubled = dataclasses.replace(sample_ideas[0], tags=["music", "music"])
        assert count_by_tag([doubled]) == {"music": 1}

    def test_sorted_by_count_then_first_appearance(self, sample_ideas):
        ranked = sorted_tag_counts(count_by_tag(sample_ideas))
        assert ranked == [("diy", 2), ("music", 1), ("outdoors", 1), ("friends", 1)]

    def test_no_tags(self):
        assert count_by_tag([]) == {}
        assert sorted_tag_counts({}) == []


@pytest.mark.analytics
class TestCountByStatus:
    """Tests for status counts and percentages."""

    def test_counts(self, sample_ideas):
        counts = count_by_status(sample_ideas)

        assert counts.as_dict() == {"open": 2, "completed": 1, "discarded": 1}
        assert counts.total == 4

    def test_percentages(self, sample_ideas):
        percentages = count_by_status(sample_ideas).percentages()
        assert percentages == {"open": 50.0, "completed": 25.0, "discarded": 25.0}

    def test_zero_total_gives_zero_percent(self):
        """Empty collections never divide by zero."""
        assert StatusCounts().percentages() == {"open": 0.0, "completed": 0.0, "discarded": 0.0}

    def test_unknown_status_is_not_counted(self, sample_ideas):
        odd = dataclasses.replace(sample_ideas[0], status=Status.UNKNOWN)
        assert count_by_status([odd]).total == 0
