"""
Services module.

Owner-scoped operations over the idea and image stores.
"""

from ideavault.services.idea_service import IdeaService, ImageUpload, LoadResult

__all__ = [
    "IdeaService",
    "ImageUpload",
    "LoadResult",
]
