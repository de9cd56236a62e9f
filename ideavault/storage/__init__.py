"""
Storage module.

Handles persistence of ideas and attached images via Supabase or in memory.
"""

from ideavault.storage.base import IdeaQuery, IdeaStore, ImageStore
from ideavault.storage.memory import InMemoryIdeaStore, InMemoryImageStore
from ideavault.storage.supabase import SupabaseIdeaStore, SupabaseImageStore

__all__ = [
    "IdeaQuery",
    "IdeaStore",
    "ImageStore",
    "InMemoryIdeaStore",
    "InMemoryImageStore",
    "SupabaseIdeaStore",
    "SupabaseImageStore",
]
