from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from shelfgraph.core.dependencies import get_query_executor
from shelfgraph.domain.entities import Author, Book, Genre, User
from shelfgraph.infrastructure.graph.memory import InMemoryGraph, InMemoryQueryExecutor
from shelfgraph.infrastructure.graph.seed import load_demo_graph
from shelfgraph.main import app
from shelfgraph.services.catalog_service import CatalogService
from shelfgraph.services.recommendation import RecommendationService

BASE = "http://test"


def add_books(graph: InMemoryGraph, **ratings: float) -> None:
    """add_books(graph, x=4.0, y=4.5) adds books "x" and "y" with those ratings."""
    for book_id, rating in ratings.items():
        graph.add_book(Book(id=book_id, title=f"Title {book_id}", rating=rating))


def add_users(graph: InMemoryGraph, *usernames: str, genres: list[str] | None = None) -> None:
    for username in usernames:
        graph.add_user(User(id=username, username=username, preferred_genres=tuple(genres or ())))


def add_genre(graph: InMemoryGraph, genre_id: str, name: str, *book_ids: str) -> None:
    graph.add_genre(Genre(id=genre_id, name=name))
    for book_id in book_ids:
        graph.add_to_genre(book_id, genre_id)


def add_author(graph: InMemoryGraph, author_id: str, name: str, *book_ids: str) -> None:
    graph.add_author(Author(id=author_id, name=name))
    for book_id in book_ids:
        graph.add_wrote(author_id, book_id)


@pytest.fixture
def graph() -> InMemoryGraph:
    return InMemoryGraph()


@pytest.fixture
def executor(graph: InMemoryGraph) -> InMemoryQueryExecutor:
    return InMemoryQueryExecutor(graph, pool_size=4, acquire_timeout=0.05)


@pytest.fixture
def service(executor: InMemoryQueryExecutor) -> RecommendationService:
    return RecommendationService(executor)


@pytest.fixture
def catalog(executor: InMemoryQueryExecutor) -> CatalogService:
    return CatalogService(executor)


@pytest.fixture
def demo_executor() -> InMemoryQueryExecutor:
    return InMemoryQueryExecutor(load_demo_graph(), pool_size=2, acquire_timeout=0.05)


@pytest.fixture
async def client(demo_executor: InMemoryQueryExecutor) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_query_executor] = lambda: demo_executor
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE) as c:
        yield c
    app.dependency_overrides.clear()
