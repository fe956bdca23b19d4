"""Domain-level application service interfaces (ports).

Concrete implementations live in ``shelfgraph/services/`` and are wired
together in ``shelfgraph/core/dependencies.py``.  Route handlers depend on
these interfaces only, so tests can swap implementations through FastAPI's
``app.dependency_overrides``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from shelfgraph.domain.entities import (
    Book,
    BookWithDetails,
    GenreWithStats,
    ReadingHistoryEntry,
    UserWithActivity,
)


class ICatalogService(ABC):

    @abstractmethod
    async def search_books(self, query: str, limit: int = 20) -> list[Book]:
        """Case-insensitive match on title or description, best rated first."""
        pass

    @abstractmethod
    async def books_by_genre(self, genre_id: str) -> list[Book]:
        pass

    @abstractmethod
    async def books_by_author(self, author_id: str) -> list[Book]:
        pass

    @abstractmethod
    async def top_rated_books(self, limit: int = 10) -> list[Book]:
        pass

    @abstractmethod
    async def book_details(self, book_id: str) -> Optional[BookWithDetails]:
        pass

    @abstractmethod
    async def user_activity(self, user_id: str) -> Optional[UserWithActivity]:
        pass

    @abstractmethod
    async def reading_history(self, user_id: str) -> list[ReadingHistoryEntry]:
        pass

    @abstractmethod
    async def popular_genres(self, limit: int = 5) -> list[GenreWithStats]:
        pass
