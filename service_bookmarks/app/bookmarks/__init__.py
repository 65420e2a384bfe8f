"""
Bookmark domain: models, storage, the service interface and its cached
decorator.
"""

from .cached_service import CachedBookmarkService
from .models import Bookmark
from .repository import BookmarkRepository, InMemoryBookmarkRepository
from .service import BookmarkService, DefaultBookmarkService

__all__ = [
    "Bookmark",
    "BookmarkRepository",
    "BookmarkService",
    "CachedBookmarkService",
    "DefaultBookmarkService",
    "InMemoryBookmarkRepository",
]
