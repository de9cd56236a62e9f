"""
Data models module.

Defines the Idea entity, its create payload, and the Mood/Status enums.
"""

from ideavault.models.idea import (
    EDITABLE_FIELDS,
    KNOWN_MOODS,
    KNOWN_STATUSES,
    Idea,
    IdeaDraft,
    Mood,
    Status,
    normalize_tags,
    parse_timestamp,
    validate_changes,
)

__all__ = [
    "EDITABLE_FIELDS",
    "KNOWN_MOODS",
    "KNOWN_STATUSES",
    "Idea",
    "IdeaDraft",
    "Mood",
    "Status",
    "normalize_tags",
    "parse_timestamp",
    "validate_changes",
]
