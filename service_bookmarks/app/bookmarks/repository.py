"""
Bookmark storage.

The repository is the source of truth the service layer reads and writes.
Ownership is enforced here: updates and deletes match on ``(id, user_id)``
and report ``NotFoundError`` when nothing matched, so a user can never touch
another user's bookmark.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from shared.errors import DuplicateError, NotFoundError
from shared.logging import get_logger
from .models import Bookmark, _utcnow, build_bookmark


class BookmarkRepository(ABC):
    """Persistence contract for bookmarks."""

    @abstractmethod
    async def create(self, bookmark: Bookmark) -> Bookmark:
        """Insert a bookmark. Raises ``DuplicateError`` on a taken code."""

    @abstractmethod
    async def list(self, user_id: str, limit: int, offset: int) -> Tuple[List[Bookmark], int]:
        """Return one page of the owner's bookmarks (newest first) and the total count."""

    @abstractmethod
    async def update(self, bookmark_id: str, user_id: str, description: str, url: str) -> None:
        """Update description and URL.

        Raises ``NotFoundError`` if unmatched and ``ValidationError`` if the
        new fields break the model's constraints.
        """

    @abstractmethod
    async def delete(self, bookmark_id: str, user_id: str) -> None:
        """Delete a bookmark. Raises ``NotFoundError`` if unmatched."""


class InMemoryBookmarkRepository(BookmarkRepository):
    """Dict-backed repository for local development and tests."""

    def __init__(self):
        self._bookmarks: Dict[str, Bookmark] = {}
        self._codes: Dict[str, str] = {}  # code -> bookmark id
        self._order: Dict[str, int] = {}  # bookmark id -> insertion sequence
        self._sequence = 0
        self._lock = asyncio.Lock()
        self.logger = get_logger("bookmarks.repository.memory")

    async def create(self, bookmark: Bookmark) -> Bookmark:
        async with self._lock:
            if bookmark.code in self._codes:
                raise DuplicateError(
                    "Short code already in use",
                    {"code": bookmark.code}
                )
            if bookmark.id in self._bookmarks:
                raise DuplicateError(
                    "Bookmark ID already in use",
                    {"id": bookmark.id}
                )

            stored = bookmark.model_copy()
            self._bookmarks[stored.id] = stored
            self._codes[stored.code] = stored.id
            self._sequence += 1
            self._order[stored.id] = self._sequence
            self.logger.debug("Created bookmark", bookmark_id=stored.id, user_id=stored.user_id)
            return stored.model_copy()

    async def list(self, user_id: str, limit: int, offset: int) -> Tuple[List[Bookmark], int]:
        async with self._lock:
            owned = [b for b in self._bookmarks.values() if b.user_id == user_id]
            order = dict(self._order)

        total = len(owned)
        if total == 0:
            return [], 0

        # Insertion order breaks ties between equal timestamps
        owned.sort(key=lambda b: (b.created_at, order[b.id]), reverse=True)
        return [b.model_copy() for b in owned[offset:offset + limit]], total

    async def update(self, bookmark_id: str, user_id: str, description: str, url: str) -> None:
        async with self._lock:
            bookmark = self._owned(bookmark_id, user_id)
            # Revalidate so an update cannot store what a create would reject
            self._bookmarks[bookmark.id] = build_bookmark(
                **{
                    **bookmark.model_dump(),
                    "description": description,
                    "url": url,
                    "updated_at": _utcnow(),
                }
            )

    async def delete(self, bookmark_id: str, user_id: str) -> None:
        async with self._lock:
            bookmark = self._owned(bookmark_id, user_id)
            del self._bookmarks[bookmark.id]
            self._order.pop(bookmark.id, None)
            self._codes.pop(bookmark.code, None)

    def _owned(self, bookmark_id: str, user_id: str) -> Bookmark:
        bookmark = self._bookmarks.get(bookmark_id)
        if bookmark is None or bookmark.user_id != user_id:
            raise NotFoundError(
                "Bookmark not found",
                {"bookmark_id": bookmark_id}
            )
        return bookmark
