"""Tests for catalog browsing against the demo library."""

import pytest

from conftest import add_books
from shelfgraph.domain.entities import EntityRef
from shelfgraph.domain.exceptions import MalformedInputError
from shelfgraph.services.catalog_service import CatalogService


@pytest.fixture
def demo_catalog(demo_executor) -> CatalogService:
    return CatalogService(demo_executor)


def ids(books):
    return [b.id for b in books]


async def test_search_is_case_insensitive_and_best_rated_first(demo_catalog):
    assert ids(await demo_catalog.search_books("harry")) == ["book-20", "book-3", "book-4"]
    assert ids(await demo_catalog.search_books("HOTEL")) == ["book-5"]
    assert ids(await demo_catalog.search_books("harry", limit=1)) == ["book-20"]


async def test_listings(demo_catalog):
    assert ids(await demo_catalog.books_by_genre("genre-1")) == ["book-13", "book-9", "book-10"]
    assert ids(await demo_catalog.books_by_author("author-2")) == ["book-20", "book-4", "book-3"]
    assert ids(await demo_catalog.top_rated_books(limit=3)) == ["book-20", "book-3", "book-4"]
    assert await demo_catalog.books_by_genre("genre-404") == []


async def test_book_details(demo_catalog):
    details = await demo_catalog.book_details("book-1")
    assert details.book.title == "1984"
    assert details.authors == [EntityRef("author-1", "George Orwell")]
    assert details.genres == [EntityRef("genre-10", "Classic"), EntityRef("genre-6", "Dystopian")]
    assert await demo_catalog.book_details("book-404") is None


async def test_book_details_without_relationships(graph, catalog):
    add_books(graph, orphan=3.0)
    details = await catalog.book_details("orphan")
    assert details.authors == []
    assert details.genres == []


async def test_user_activity_and_history(demo_catalog):
    activity = await demo_catalog.user_activity("user-1")
    assert activity.user.username == "bookworm42"
    assert (activity.books_read, activity.followers, activity.following) == (3, 2, 1)
    assert await demo_catalog.user_activity("user-404") is None

    history = await demo_catalog.reading_history("user-1")
    assert [e.book.id for e in history] == ["book-13", "book-9", "book-3"]
    assert history[0].rating == 4


async def test_popular_genres(demo_catalog):
    genres = await demo_catalog.popular_genres(limit=2)
    assert [(g.genre.name, g.readers) for g in genres] == [("Dystopian", 3), ("Science Fiction", 2)]


async def test_input_validation(demo_catalog, demo_executor):
    with pytest.raises(MalformedInputError):
        await demo_catalog.search_books("   ")
    with pytest.raises(MalformedInputError):
        await demo_catalog.top_rated_books(limit=0)
    with pytest.raises(MalformedInputError):
        await demo_catalog.book_details("")
    assert demo_executor.queries_run == 0
