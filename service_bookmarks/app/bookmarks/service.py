"""
Bookmark service layer.

``BookmarkService`` is the interface the HTTP layer talks to. The default
implementation reads and writes the repository directly; the cached
implementation in ``cached_service`` wraps any ``BookmarkService`` and
exposes the same interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from shared.errors import DuplicateError
from shared.logging import get_logger
from shared.retry import RetryConfig, retry_on_exception
from ..pagination import PageRequest, PagedResult, calculate_metadata
from .codes import CodeGenerator, DEFAULT_CODE_LENGTH
from .models import Bookmark, build_bookmark
from .repository import BookmarkRepository


class BookmarkService(ABC):
    """Operations on a user's bookmarks."""

    @abstractmethod
    async def create_bookmark(self, owner_id: str, description: str, url: str) -> Bookmark:
        """Create a bookmark with a fresh short code."""

    @abstractmethod
    async def list_bookmarks(self, owner_id: str, page_request: Optional[PageRequest]) -> PagedResult[Bookmark]:
        """Return one page of the owner's bookmarks, newest first."""

    @abstractmethod
    async def update_bookmark(self, bookmark_id: str, owner_id: str, description: str, url: str) -> None:
        """Change a bookmark's description and URL."""

    @abstractmethod
    async def delete_bookmark(self, bookmark_id: str, owner_id: str) -> None:
        """Remove a bookmark."""


class DefaultBookmarkService(BookmarkService):
    """Bookmark service backed directly by a repository.

    Short codes are random, so two bookmarks can draw the same one. The
    repository rejects the second insert with ``DuplicateError`` and the
    insert is retried with a new code up to ``code_max_attempts`` times,
    after which ``RetryError`` reaches the caller.
    """

    def __init__(
        self,
        repository: BookmarkRepository,
        code_generator: Optional[CodeGenerator] = None,
        *,
        code_length: int = DEFAULT_CODE_LENGTH,
        code_max_attempts: int = 3,
    ):
        self.repository = repository
        self.code_generator = code_generator or CodeGenerator()
        self.code_length = code_length
        self.logger = get_logger("bookmarks.service")

        retry_config = RetryConfig(
            max_attempts=max(1, code_max_attempts),
            base_delay=0.0,
            jitter=False,
            backoff_strategy="fixed",
        )
        self._insert_with_new_code = retry_on_exception((DuplicateError,), retry_config)(
            self._insert_with_new_code
        )

    async def _insert_with_new_code(self, owner_id: str, description: str, url: str) -> Bookmark:
        bookmark = build_bookmark(
            description=description,
            url=url,
            code=self.code_generator.generate(self.code_length),
            user_id=owner_id,
        )
        return await self.repository.create(bookmark)

    async def create_bookmark(self, owner_id: str, description: str, url: str) -> Bookmark:
        bookmark = await self._insert_with_new_code(owner_id, description, url)
        self.logger.info("Bookmark created", bookmark_id=bookmark.id, owner_id=owner_id)
        return bookmark

    async def list_bookmarks(self, owner_id: str, page_request: Optional[PageRequest]) -> PagedResult[Bookmark]:
        if page_request is None:
            page_request = PageRequest()

        limit = page_request.get_limit()
        offset = page_request.offset()

        bookmarks, total = await self.repository.list(owner_id, limit, offset)

        return PagedResult[Bookmark](
            data=bookmarks,
            metadata=calculate_metadata(total, page_request.page, limit),
        )

    async def update_bookmark(self, bookmark_id: str, owner_id: str, description: str, url: str) -> None:
        await self.repository.update(bookmark_id, owner_id, description, url)

    async def delete_bookmark(self, bookmark_id: str, owner_id: str) -> None:
        await self.repository.delete(bookmark_id, owner_id)
