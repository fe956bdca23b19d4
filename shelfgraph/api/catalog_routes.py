"""Catalog API routes (search, listings, composite views)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from shelfgraph.api.schemas import (
    BookDetailsResponse,
    BookListResponse,
    BookResponse,
    GenreStatsResponse,
    ReadingHistoryEntryResponse,
    UserActivityResponse,
)
from shelfgraph.core.dependencies import get_catalog_service
from shelfgraph.domain.entities import Book
from shelfgraph.domain.services import ICatalogService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/catalog", tags=["catalog"])

Catalog = Annotated[ICatalogService, Depends(get_catalog_service)]


def _book_list(books: list[Book]) -> BookListResponse:
    return BookListResponse(
        books=[BookResponse.model_validate(b) for b in books],
        total=len(books),
    )


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
@router.get("/books/search", response_model=BookListResponse)
async def search_books(
    catalog: Catalog,
    q: Annotated[str, Query(min_length=1)],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> BookListResponse:
    return _book_list(await catalog.search_books(q, limit))


@router.get("/books/top-rated", response_model=BookListResponse)
async def top_rated_books(
    catalog: Catalog,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> BookListResponse:
    return _book_list(await catalog.top_rated_books(limit))


@router.get("/books/{book_id}", response_model=BookDetailsResponse)
async def get_book_details(book_id: str, catalog: Catalog) -> BookDetailsResponse:
    details = await catalog.book_details(book_id)
    if details is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return BookDetailsResponse.model_validate(details)


# ---------------------------------------------------------------------------
# Genres / authors
# ---------------------------------------------------------------------------
@router.get("/genres/popular", response_model=list[GenreStatsResponse])
async def popular_genres(
    catalog: Catalog,
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
) -> list[GenreStatsResponse]:
    return [GenreStatsResponse.model_validate(g) for g in await catalog.popular_genres(limit)]


@router.get("/genres/{genre_id}/books", response_model=BookListResponse)
async def books_by_genre(genre_id: str, catalog: Catalog) -> BookListResponse:
    return _book_list(await catalog.books_by_genre(genre_id))


@router.get("/authors/{author_id}/books", response_model=BookListResponse)
async def books_by_author(author_id: str, catalog: Catalog) -> BookListResponse:
    return _book_list(await catalog.books_by_author(author_id))


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
@router.get("/users/{user_id}", response_model=UserActivityResponse)
async def get_user_activity(user_id: str, catalog: Catalog) -> UserActivityResponse:
    activity = await catalog.user_activity(user_id)
    if activity is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserActivityResponse.model_validate(activity)


@router.get("/users/{user_id}/history", response_model=list[ReadingHistoryEntryResponse])
async def get_reading_history(
    user_id: str, catalog: Catalog
) -> list[ReadingHistoryEntryResponse]:
    entries = await catalog.reading_history(user_id)
    return [ReadingHistoryEntryResponse.model_validate(e) for e in entries]
