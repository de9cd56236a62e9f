"""
Explicit application state.

The active section and the signed-in user are passed into every view as an
AppState value instead of living in globals.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Section(Enum):
    """Top-level views. Any section can be reached from any other."""
    IDEAS = "ideas"
    CALENDAR = "calendar"
    DASHBOARD = "dashboard"
    
    @classmethod
    def parse(cls, value: Any) -> "Section":
        """Map a raw value to a Section; unrecognized values give IDEAS."""
        for section in cls:
            if section.value == value:
                return section
        return cls.IDEAS
    
    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class AppState:
    """
    State of one page render.
    
    Attributes:
        section: Which view is shown.
        user_id: Signed-in user, None when signed out.
        email: Email of the signed-in user.
    """
    section: Section = Section.IDEAS
    user_id: Optional[str] = None
    email: str = ""
    
    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)
