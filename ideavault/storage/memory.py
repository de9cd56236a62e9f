"""
In-memory storage backends for development and testing.

Behaves like the Supabase backends: owner scoping, newest-first ordering,
NotFound on foreign or missing ids, idempotent delete. Data is lost when the
process ends.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ideavault.errors import NotFound, StorageError
from ideavault.models.idea import Idea, IdeaDraft, validate_changes
from ideavault.storage.base import IdeaQuery, IdeaStore, ImageStore


class InMemoryIdeaStore(IdeaStore):
    """Idea rows kept in a dict keyed by id."""
    
    def __init__(self):
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
    
    @property
    def name(self) -> str:
        return "memory"
    
    def list_ideas(self, owner_id: str, query: Optional[IdeaQuery] = None) -> List[Idea]:
        with self._lock:
            rows = [dict(r) for r in self._rows.values() if r["user_id"] == owner_id]
        
        ideas = [idea for idea in map(Idea.from_row, rows) if idea is not None]
        if query is not None and not query.is_empty:
            ideas = [idea for idea in ideas if query.matches(idea)]
        return sorted(ideas, key=lambda i: i.created_at, reverse=True)
    
    def create_idea(self, draft: IdeaDraft) -> Idea:
        draft.validate()
        
        now = datetime.now(timezone.utc).isoformat()
        row = draft.to_row()
        row.update({"id": str(uuid.uuid4()), "created_at": now, "updated_at": now})
        
        with self._lock:
            self._rows[row["id"]] = row
        return Idea.from_row(dict(row))
    
    def update_idea(self, owner_id: str, idea_id: str, changes: Dict[str, Any]) -> Idea:
        patch = validate_changes(changes)
        
        with self._lock:
            row = self._rows.get(idea_id)
            if row is None or row["user_id"] != owner_id:
                raise NotFound(f"Idea {idea_id} not found")
            row.update(patch)
            row["updated_at"] = datetime.now(timezone.utc).isoformat()
            return Idea.from_row(dict(row))
    
    def delete_idea(self, owner_id: str, idea_id: str) -> None:
        with self._lock:
            row = self._rows.get(idea_id)
            if row is not None and row["user_id"] == owner_id:
                del self._rows[idea_id]
    
    def insert_row(self, row: Dict[str, Any]) -> None:
        """Insert a raw row as-is (for seeding and tests)."""
        with self._lock:
            self._rows[str(row["id"])] = dict(row)
    
    def clear(self) -> None:
        """Clear all records (for testing)."""
        with self._lock:
            self._rows.clear()
    
    def count(self) -> int:
        """Return number of stored records (for testing)."""
        return len(self._rows)


class InMemoryImageStore(ImageStore):
    """
    Image blobs kept in a dict.
    
    URLs are "<base_url>/<key>"; the web app serves them in development.
    """
    
    def __init__(self, base_url: str = "/dev-images"):
        self.base_url = base_url.rstrip("/")
        self._objects: Dict[str, Tuple[bytes, str]] = {}
        self._lock = threading.Lock()
    
    @property
    def name(self) -> str:
        return "memory"
    
    def upload_image(self, data: bytes, filename: str, content_type: str = "application/octet-stream") -> str:
        if not data:
            raise StorageError("Cannot upload an empty file")
        key = f"{uuid.uuid4().hex}-{filename}"
        with self._lock:
            self._objects[key] = (bytes(data), content_type)
        return f"{self.base_url}/{key}"
    
    def delete_image(self, url: str) -> None:
        with self._lock:
            self._objects.pop(url.rsplit("/", 1)[-1], None)
    
    def get(self, key: str) -> Optional[Tuple[bytes, str]]:
        """Return (data, content_type) for a stored key."""
        with self._lock:
            return self._objects.get(key)
    
    def count(self) -> int:
        with self._lock:
            return len(self._objects)
