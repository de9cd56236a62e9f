"""
Base storage abstractions for IdeaVault.

Defines the interfaces the Idea Store Accessor is built on: a row store for
idea records and an object store for attached images. Implementations exist
for Supabase (PostgREST + Storage API) and for in-memory development use.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ideavault.models.idea import Idea, IdeaDraft, Mood, Status


@dataclass
class IdeaQuery:
    """
    Optional store-side filters for listing ideas.
    
    All filters compose with AND; tags match if the idea carries any of them.
    
    Attributes:
        mood: Only ideas with this mood.
        favorite_only: Only favorited ideas.
        status: Only ideas with this status.
        tags: Only ideas carrying at least one of these tags.
    """
    mood: Optional[Mood] = None
    favorite_only: bool = False
    status: Optional[Status] = None
    tags: List[str] = field(default_factory=list)
    
    @property
    def is_empty(self) -> bool:
        return not (self.mood or self.favorite_only or self.status or self.tags)
    
    def matches(self, idea: Idea) -> bool:
        """Apply the filters to an in-memory idea."""
        if self.mood is not None and idea.mood is not self.mood:
            return False
        if self.favorite_only and not idea.favorite:
            return False
        if self.status is not None and idea.status is not self.status:
            return False
        if self.tags and not any(tag in idea.tags for tag in self.tags):
            return False
        return True


class IdeaStore(ABC):
    """
    Abstract base class for idea row stores.
    
    Every operation is scoped to an owner: rows belonging to another user
    are never returned, changed or removed.
    """
    
    @property
    @abstractmethod
    def name(self) -> str:
        """
        Return the name of this storage backend.
        
        Used for logging and debugging.
        """
        pass
    
    @abstractmethod
    def list_ideas(self, owner_id: str, query: Optional[IdeaQuery] = None) -> List[Idea]:
        """
        Return all ideas of an owner, newest first.
        
        Args:
            owner_id: The user whose ideas to load.
            query: Optional extra filters.
            
        Returns:
            List of Idea sorted by created_at descending.
            
        Raises:
            StoreUnavailable: If the backing store cannot be reached.
        """
        pass
    
    @abstractmethod
    def create_idea(self, draft: IdeaDraft) -> Idea:
        """
        Insert a new idea. The store assigns id and timestamps.
        
        Raises:
            ValidationError: If the draft is invalid.
        """
        pass
    
    @abstractmethod
    def update_idea(self, owner_id: str, idea_id: str, changes: Dict[str, Any]) -> Idea:
        """
        Merge fields into an existing idea; other fields stay unchanged.
        
        Raises:
            NotFound: If no idea with this id belongs to the owner.
            ValidationError: If the changes are invalid.
        """
        pass
    
    @abstractmethod
    def delete_idea(self, owner_id: str, idea_id: str) -> None:
        """
        Remove an idea. Deleting a missing id is not an error.
        """
        pass
    
    def __str__(self) -> str:
        return f"IdeaStore({self.name})"
    
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class ImageStore(ABC):
    """Abstract base class for image object storage."""
    
    @property
    @abstractmethod
    def name(self) -> str:
        pass
    
    @abstractmethod
    def upload_image(self, data: bytes, filename: str, content_type: str = "application/octet-stream") -> str:
        """
        Store a binary object.
        
        Returns:
            Public URL of the stored object.
            
        Raises:
            StorageError: If the upload fails.
        """
        pass
    
    @abstractmethod
    def delete_image(self, url: str) -> None:
        """
        Remove a previously uploaded object by its public URL.
        
        Raises:
            StorageError: If removal fails.
        """
        pass
    
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
