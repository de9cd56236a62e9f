"""
Core data model for IdeaVault.

Defines the Idea dataclass (a persisted journal note), the IdeaDraft create
payload, and the closed Mood and Status enumerations.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ideavault.errors import ValidationError


class Mood(Enum):
    """
    Emotional tone of an idea.
    
    UNKNOWN stands in for any value the store returns outside the known set,
    so rendering and counting code can match it explicitly.
    """
    HAPPY = "happy"
    PLAYFUL = "playful"
    DREAMY = "dreamy"
    WILD = "wild"
    UNKNOWN = "unknown"
    
    @classmethod
    def parse(cls, value: Any) -> "Mood":
        """Map a raw value to a Mood, never raising."""
        if isinstance(value, Mood):
            return value
        if isinstance(value, str):
            for mood in KNOWN_MOODS:
                if mood.value == value:
                    return mood
        return cls.UNKNOWN
    
    @property
    def icon(self) -> str:
        return _MOOD_ICONS[self]
    
    @property
    def label(self) -> str:
        return self.value.capitalize()


_MOOD_ICONS = {
    Mood.HAPPY: "😊",
    Mood.PLAYFUL: "🎮",
    Mood.DREAMY: "💭",
    Mood.WILD: "🔥",
    Mood.UNKNOWN: "❔",
}

KNOWN_MOODS = (Mood.HAPPY, Mood.PLAYFUL, Mood.DREAMY, Mood.WILD)


class Status(Enum):
    """Lifecycle state of an idea."""
    OPEN = "open"
    COMPLETED = "completed"
    DISCARDED = "discarded"
    UNKNOWN = "unknown"
    
    @classmethod
    def parse(cls, value: Any) -> "Status":
        """
        Map a raw value to a Status, never raising.
        
        A missing value is the column default (OPEN); anything else outside
        the known set is UNKNOWN.
        """
        if isinstance(value, Status):
            return value
        if value is None:
            return cls.OPEN
        if isinstance(value, str):
            for status in KNOWN_STATUSES:
                if status.value == value:
                    return status
        return cls.UNKNOWN
    
    @property
    def label(self) -> str:
        return self.value.capitalize()


KNOWN_STATUSES = (Status.OPEN, Status.COMPLETED, Status.DISCARDED)

# Fields a partial update may touch
EDITABLE_FIELDS = ("text", "tags", "mood", "favorite", "status", "image_url")

# Fields owned by the store
IMMUTABLE_FIELDS = ("id", "user_id", "owner_id", "created_at", "updated_at")

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as returned by the store.
    
    The calendar date of the string is kept as-is: no timezone conversion is
    applied, only the offset is attached.
    
    Returns:
        datetime, or None if the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    
    text = value.strip().replace("Z", "+00:00").replace(" ", "T", 1)
    # Postgres trims trailing zeros from fractional seconds
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def normalize_tags(raw: Union[str, List[str], None]) -> List[str]:
    """
    Clean a tag list.

    Accepts a comma-separated string or a list of strings. Each tag is
    trimmed, empties are dropped, and duplicates are removed keeping the
    first occurrence.

    Raises:
        ValidationError: If raw is neither a string nor a list/tuple.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    elif not isinstance(raw, (list, tuple)):
        raise ValidationError(f"tags must be a list or a comma-separated string, got {raw!r}")

    tags: List[str] = []
    for tag in raw:
        if not isinstance(tag, str):
            continue
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _check_mood(value: Any, errors: List[str]) -> None:
    if Mood.parse(value) is Mood.UNKNOWN:
        errors.append(f"mood must be one of {[m.value for m in KNOWN_MOODS]}, got {value!r}")


def _check_status(value: Any, errors: List[str]) -> None:
    if value is None or Status.parse(value) is Status.UNKNOWN:
        errors.append(f"status must be one of {[s.value for s in KNOWN_STATUSES]}, got {value!r}")


@dataclass
class Idea:
    """
    A single idea owned by one user.
    
    Attributes:
        id: Store-assigned identifier.
        owner_id: The user the idea belongs to (user_id column).
        text: Free text of the idea.
        tags: Tags in display order.
        mood: Emotional tone; UNKNOWN for foreign values.
        favorite: Whether the user starred the idea.
        status: Lifecycle state; UNKNOWN for foreign values.
        image_url: Public URL of the attached image, if any.
        created_at: Creation time, the only key used for date bucketing.
        updated_at: Time of the last mutation.
    """
    
    id: str
    owner_id: str
    text: str
    created_at: datetime
    tags: List[str] = field(default_factory=list)
    mood: Mood = Mood.HAPPY
    favorite: bool = False
    status: Status = Status.OPEN
    image_url: Optional[str] = None
    updated_at: Optional[datetime] = None
    
    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> Optional["Idea"]:
        """
        Create an Idea from a store row.
        
        Returns:
            Idea, or None if the row lacks id, owner, text or a readable created_at.
        """
        if not isinstance(row, dict):
            return None
        
        idea_id = row.get("id")
        owner_id = row.get("user_id")
        text = row.get("text")
        created_at = parse_timestamp(row.get("created_at"))
        
        if idea_id is None or not owner_id or not isinstance(text, str) or created_at is None:
            return None
        
        tags = row.get("tags") or []
        
        return cls(
            id=str(idea_id),
            owner_id=str(owner_id),
            text=text,
            tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else [],
            mood=Mood.parse(row.get("mood")),
            favorite=bool(row.get("favorite", False)),
            status=Status.parse(row.get("status")),
            image_url=row.get("image_url") or None,
            created_at=created_at,
            updated_at=parse_timestamp(row.get("updated_at")),
        )
    
    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-safe dictionary.
        
        Enums become their string values and datetimes ISO strings.
        """
        return {
            "id": self.id,
            "user_id": self.owner_id,
            "text": self.text,
            "tags": list(self.tags),
            "mood": self.mood.value,
            "favorite": self.favorite,
            "status": self.status.value,
            "image_url": self.image_url,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
    
    def __str__(self) -> str:
        star = "★" if self.favorite else "☆"
        return f"{star} [{self.mood.value}/{self.status.value}] {self.text[:40]}"


@dataclass
class IdeaDraft:
    """
    Payload for creating an idea. The store assigns id and timestamps.
    """
    
    owner_id: str
    text: str
    tags: List[str] = field(default_factory=list)
    mood: Mood = Mood.HAPPY
    favorite: bool = False
    status: Status = Status.OPEN
    image_url: Optional[str] = None
    
    def __post_init__(self) -> None:
        self.tags = normalize_tags(self.tags)
        if not isinstance(self.mood, Mood):
            self.mood = Mood.parse(self.mood)
        if not isinstance(self.status, Status):
            self.status = Status.parse(self.status)
    
    def validate(self) -> None:
        """
        Validate the payload.
        
        Raises:
            ValidationError: If any field is invalid.
        """
        errors = []
        
        if not self.owner_id:
            errors.append("owner_id is required")
        
        if not isinstance(self.text, str) or not self.text.strip():
            errors.append("text is required and cannot be empty")
        
        _check_mood(self.mood, errors)
        _check_status(self.status, errors)

        if not isinstance(self.favorite, bool):
            errors.append(f"favorite must be true or false, got {self.favorite!r}")

        if errors:
            raise ValidationError(f"Idea validation failed: {'; '.join(errors)}")
    
    def to_row(self) -> Dict[str, Any]:
        """Convert to the column layout of the ideas table."""
        return {
            "user_id": self.owner_id,
            "text": self.text.strip(),
            "tags": list(self.tags),
            "mood": self.mood.value,
            "favorite": bool(self.favorite),
            "status": self.status.value,
            "image_url": self.image_url,
        }


def validate_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check and normalize a partial-update payload.
    
    Args:
        changes: Field name to new value.
        
    Returns:
        Column dict ready for the store (enums as strings, tags cleaned).
        
    Raises:
        ValidationError: On empty payloads, immutable or unknown fields,
            empty text, or unknown mood/status.
    """
    if not changes:
        raise ValidationError("No fields to update")
    
    errors = []
    row: Dict[str, Any] = {}
    
    for name, value in changes.items():
        if name in IMMUTABLE_FIELDS:
            errors.append(f"{name} cannot be changed")
        elif name not in EDITABLE_FIELDS:
            errors.append(f"unknown field {name!r}")
        elif name == "text":
            if not isinstance(value, str) or not value.strip():
                errors.append("text is required and cannot be empty")
            else:
                row["text"] = value.strip()
        elif name == "tags":
            row["tags"] = normalize_tags(value)
        elif name == "mood":
            _check_mood(value, errors)
            row["mood"] = Mood.parse(value).value
        elif name == "status":
            _check_status(value, errors)
            row["status"] = Status.parse(value).value
        elif name == "favorite":
            if isinstance(value, bool):
                row["favorite"] = value
            else:
                errors.append(f"favorite must be true or false, got {value!r}")
        elif name == "image_url":
            row["image_url"] = value or None
    
    if errors:
        raise ValidationError(f"Update validation failed: {'; '.join(errors)}")
    
    return row
