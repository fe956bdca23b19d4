"""Read-only catalog browsing over the graph."""

import logging
from typing import Optional

from shelfgraph.domain.entities import (
    Book,
    BookWithDetails,
    GenreWithStats,
    ReadingHistoryEntry,
    UserWithActivity,
)
from shelfgraph.domain.exceptions import MalformedInputError
from shelfgraph.domain.projection import (
    books_from_rows,
    to_book_with_details,
    to_genre_with_stats,
    to_reading_entry,
    to_user_with_activity,
)
from shelfgraph.domain.repositories import IQueryExecutor
from shelfgraph.domain.services import ICatalogService
from shelfgraph.infrastructure.graph import queries

logger = logging.getLogger(__name__)


def _require_id(name: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise MalformedInputError(f"{name} must be a non-empty string")


def _require_limit(limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise MalformedInputError(f"limit must be a positive integer, got {limit!r}")


class CatalogService(ICatalogService):
    """Catalog queries: search, per-genre/author listings and composite views."""

    def __init__(self, executor: IQueryExecutor):
        self.executor = executor

    async def search_books(self, query: str, limit: int = 20) -> list[Book]:
        if not isinstance(query, str) or not query.strip():
            raise MalformedInputError("Search text must not be blank")
        _require_limit(limit)
        rows = await self.executor.execute(
            queries.SEARCH_BOOKS, {"query": query.strip(), "limit": limit}
        )
        books = books_from_rows(rows)
        logger.info("Search %r matched %d books", query, len(books))
        return books

    async def books_by_genre(self, genre_id: str) -> list[Book]:
        _require_id("genre_id", genre_id)
        rows = await self.executor.execute(queries.BOOKS_BY_GENRE, {"genreId": genre_id})
        return books_from_rows(rows)

    async def books_by_author(self, author_id: str) -> list[Book]:
        _require_id("author_id", author_id)
        rows = await self.executor.execute(queries.BOOKS_BY_AUTHOR, {"authorId": author_id})
        return books_from_rows(rows)

    async def top_rated_books(self, limit: int = 10) -> list[Book]:
        _require_limit(limit)
        rows = await self.executor.execute(queries.TOP_RATED_BOOKS, {"limit": limit})
        return books_from_rows(rows)

    async def book_details(self, book_id: str) -> Optional[BookWithDetails]:
        _require_id("book_id", book_id)
        rows = await self.executor.execute(queries.BOOK_DETAILS, {"bookId": book_id})
        if not rows:
            return None
        return to_book_with_details(rows[0])

    async def user_activity(self, user_id: str) -> Optional[UserWithActivity]:
        _require_id("user_id", user_id)
        rows = await self.executor.execute(queries.USER_ACTIVITY, {"userId": user_id})
        if not rows:
            return None
        return to_user_with_activity(rows[0])

    async def reading_history(self, user_id: str) -> list[ReadingHistoryEntry]:
        _require_id("user_id", user_id)
        rows = await self.executor.execute(queries.READING_HISTORY, {"userId": user_id})
        entries = [to_reading_entry(row) for row in rows]
        return [entry for entry in entries if entry is not None]

    async def popular_genres(self, limit: int = 5) -> list[GenreWithStats]:
        _require_limit(limit)
        rows = await self.executor.execute(queries.POPULAR_GENRES, {"limit": limit})
        genres = [to_genre_with_stats(row) for row in rows]
        return [genre for genre in genres if genre is not None]
