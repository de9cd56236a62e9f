"""
Idea Service - owner-scoped access to a user's ideas.

Wraps an IdeaStore and an ImageStore for one signed-in user:

    upload image (optional) → write idea → caller reloads the full list

Design rules:
- Owner scope: every call uses the owner id given at construction; without
  one, every call raises Unauthenticated.
- Full reload: mutations return nothing the views rely on; callers reload
  the whole list afterwards instead of patching local state.
- Image first: an attached image is stored before the idea references it.
  If the idea write then fails, the uploaded image is removed again.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ideavault.config import MAX_IMAGE_BYTES
from ideavault.errors import (
    IdeaVaultError,
    StorageError,
    Unauthenticated,
    ValidationError,
)
from ideavault.models.idea import Idea, IdeaDraft, Mood, Status, validate_changes
from ideavault.storage.base import IdeaQuery, IdeaStore, ImageStore

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class ImageUpload:
    """
    An image file attached to a create or edit.

    Attributes:
        data: Raw file bytes.
        filename: Name supplied by the client.
        content_type: MIME type supplied by the client.
    """
    data: bytes
    filename: str
    content_type: str = "application/octet-stream"

    @property
    def is_empty(self) -> bool:
        return not self.data

    def validate(self, max_bytes: int = None) -> None:
        """
        Raises:
            ValidationError: If the file is too large or not an image.
        """
        max_bytes = max_bytes if max_bytes is not None else MAX_IMAGE_BYTES

        if not (self.content_type or "").startswith("image/"):
            raise ValidationError(f"Attachment must be an image, got {self.content_type!r}")
        if len(self.data) > max_bytes:
            raise ValidationError(
                f"Image is too large ({len(self.data)} bytes, limit {max_bytes})"
            )


@dataclass
class LoadResult:
    """
    Result of loading the idea list.

    A failed load yields no ideas plus an error message, so views render an
    empty state instead of failing.
    """
    ideas: List[Idea] = field(default_factory=list)
    error: Optional[str] = None


# =============================================================================
# Service
# =============================================================================

class IdeaService:
    """
    Owner-scoped create/read/update/delete over the configured stores.

    Usage:
        service = IdeaService(store, images, owner_id=session.user_id)
        service.create("Build a kayak", tags=["outdoors", "diy"], mood="wild")
        ideas = service.load().ideas
    """

    def __init__(self, store: IdeaStore, images: ImageStore, owner_id: Optional[str]):
        """
        Args:
            store: Backend for idea rows.
            images: Backend for attached images.
            owner_id: The signed-in user, or None when signed out.
        """
        self.store = store
        self.images = images
        self.owner_id = owner_id

    def _require_owner(self) -> str:
        if not self.owner_id:
            raise Unauthenticated("Sign in to manage ideas")
        return self.owner_id

    # =========================================================================
    # Reads
    # =========================================================================

    def list_ideas(self, query: Optional[IdeaQuery] = None) -> List[Idea]:
        """
        Return the owner's ideas, newest first.

        Raises:
            Unauthenticated: Without an owner.
            StoreUnavailable: If the store cannot be reached.
        """
        owner_id = self._require_owner()
        return self.store.list_ideas(owner_id, query)

    def load(self, query: Optional[IdeaQuery] = None) -> LoadResult:
        """
        Load ideas for a view, converting store failures into an empty result.

        Unauthenticated is not converted: views must redirect to sign-in.
        """
        try:
            return LoadResult(ideas=self.list_ideas(query))
        except Unauthenticated:
            raise
        except IdeaVaultError as e:
            logger.error("Loading ideas for %s failed: %s", self.owner_id, e)
            return LoadResult(ideas=[], error=str(e))

    # =========================================================================
    # Writes
    # =========================================================================

    def _upload(self, image: Optional[ImageUpload]) -> Optional[str]:
        """Store an attached image and return its URL (None without one)."""
        if image is None or image.is_empty:
            return None
        image.validate()
        return self.images.upload_image(image.data, image.filename, image.content_type)

    def _discard_upload(self, url: Optional[str]) -> None:
        """Remove an image whose idea write failed."""
        if not url:
            return
        try:
            self.images.delete_image(url)
            logger.info("Removed orphaned image %s", url)
        except StorageError as e:
            logger.warning("Could not remove orphaned image %s: %s", url, e)

    def create(
        self,
        text: str,
        tags: Any = None,
        mood: Any = Mood.HAPPY,
        favorite: bool = False,
        status: Any = Status.OPEN,
        image: Optional[ImageUpload] = None,
    ) -> Idea:
        """
        Create an idea for the owner.

        Args:
            text: Idea text (required, non-empty).
            tags: List or comma-separated string.
            mood: Mood or its string value.
            favorite: Starred on creation.
            status: Status or its string value (defaults to open).
            image: Optional attachment, uploaded before the idea is written.

        Raises:
            Unauthenticated, ValidationError, StorageError, StoreUnavailable.
        """
        owner_id = self._require_owner()

        draft = IdeaDraft(
            owner_id=owner_id,
            text=text or "",
            tags=tags,
            mood=mood,
            favorite=favorite,
            status=status,
        )
        # Nothing is uploaded for an invalid draft
        draft.validate()

        image_url = self._upload(image)
        draft.image_url = image_url

        try:
            return self.store.create_idea(draft)
        except IdeaVaultError:
            self._discard_upload(image_url)
            raise

    def update(
        self,
        idea_id: str,
        changes: Dict[str, Any],
        image: Optional[ImageUpload] = None,
    ) -> Idea:
        """
        Apply a partial update; unspecified fields stay unchanged.

        A new image replaces image_url in the changes.

        Raises:
            Unauthenticated, ValidationError, NotFound, StorageError,
            StoreUnavailable.
        """
        owner_id = self._require_owner()
        changes = dict(changes or {})
        if changes:
            validate_changes(changes)

        image_url = self._upload(image)
        if image_url:
            changes["image_url"] = image_url

        try:
            return self.store.update_idea(owner_id, idea_id, changes)
        except IdeaVaultError:
            self._discard_upload(image_url)
            raise

    def toggle_favorite(self, idea_id: str, favorite: bool) -> Idea:
        """Set the favorite flag (swipe right = True, left = False)."""
        return self.update(idea_id, {"favorite": bool(favorite)})

    def set_status(self, idea_id: str, status: Any) -> Idea:
        """Move an idea to open, completed or discarded."""
        return self.update(idea_id, {"status": status})

    def delete(self, idea_id: str) -> None:
        """Delete an idea; a missing id is not an error."""
        owner_id = self._require_owner()
        self.store.delete_idea(owner_id, idea_id)
