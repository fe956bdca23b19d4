"""In-memory graph and query executor.

Answers the same named queries as the Neo4j executor from a dict-backed
graph.  Used for tests and for running the API without a database.  Rows use
the same shape the Neo4j driver produces: node columns are property dicts
keyed by camelCase property names.
"""

import asyncio
import copy
import logging
from collections import defaultdict
from statistics import mean
from typing import Any, Callable, Optional

from shelfgraph.domain.entities import (
    Author,
    BelongsToEdge,
    Book,
    FollowsEdge,
    Genre,
    ReadEdge,
    SimilarToEdge,
    User,
    WantsToReadEdge,
    WroteEdge,
)
from shelfgraph.domain.exceptions import ExecutorUnavailableError, UnsupportedQueryError
from shelfgraph.domain.repositories import GraphQuery, IQueryExecutor, Row
from shelfgraph.infrastructure.graph import queries

logger = logging.getLogger(__name__)

Props = dict[str, Any]


class InMemoryGraph:
    """Nodes as property dicts, relationships as domain edge records."""

    def __init__(self) -> None:
        self.books: dict[str, Props] = {}
        self.authors: dict[str, Props] = {}
        self.genres: dict[str, Props] = {}
        self.users: dict[str, Props] = {}
        self.reads: dict[tuple[str, str], ReadEdge] = {}
        self.wishlist: dict[tuple[str, str], WantsToReadEdge] = {}
        self.follows: dict[tuple[str, str], FollowsEdge] = {}
        self.similar: list[SimilarToEdge] = []
        self.wrote: set[WroteEdge] = set()
        self.belongs_to: set[BelongsToEdge] = set()

    # -- Nodes --------------------------------------------------------------
    def add_book(self, book: Book) -> None:
        self.books[book.id] = {
            "id": book.id,
            "title": book.title,
            "publishedYear": book.published_year,
            "pages": book.pages,
            "isbn": book.isbn,
            "rating": book.rating,
            "description": book.description,
        }

    def add_author(self, author: Author) -> None:
        self.authors[author.id] = {
            "id": author.id,
            "name": author.name,
            "birthYear": author.birth_year,
            "nationality": author.nationality,
        }

    def add_genre(self, genre: Genre) -> None:
        self.genres[genre.id] = {
            "id": genre.id,
            "name": genre.name,
            "description": genre.description,
        }

    def add_user(self, user: User) -> None:
        self.users[user.id] = {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "createdAt": user.created_at,
            "preferredGenres": list(user.preferred_genres),
        }

    # -- Relationships (MERGE semantics: one edge per pair) ----------------
    def add_read(
        self, user_id: str, book_id: str, rating: int, read_date: str = "", review: str = ""
    ) -> None:
        self._require(self.users, user_id)
        self._require(self.books, book_id)
        self.reads[(user_id, book_id)] = ReadEdge(user_id, book_id, rating, read_date, review)

    def add_wish(self, user_id: str, book_id: str, added_date: str = "") -> None:
        self._require(self.users, user_id)
        self._require(self.books, book_id)
        self.wishlist[(user_id, book_id)] = WantsToReadEdge(user_id, book_id, added_date)

    def add_follow(self, follower_id: str, followed_id: str) -> None:
        if follower_id == followed_id:
            raise ValueError("A user cannot follow themselves")
        self._require(self.users, follower_id)
        self._require(self.users, followed_id)
        self.follows[(follower_id, followed_id)] = FollowsEdge(follower_id, followed_id)

    def add_similarity(
        self, book_id: str, other_id: str, score: float, symmetric: bool = True
    ) -> None:
        self._require(self.books, book_id)
        self._require(self.books, other_id)
        self.similar.append(SimilarToEdge(book_id, other_id, score))
        if symmetric:
            self.similar.append(SimilarToEdge(other_id, book_id, score))

    def add_wrote(self, author_id: str, book_id: str) -> None:
        self._require(self.authors, author_id)
        self._require(self.books, book_id)
        self.wrote.add(WroteEdge(author_id, book_id))

    def add_to_genre(self, book_id: str, genre_id: str) -> None:
        self._require(self.books, book_id)
        self._require(self.genres, genre_id)
        self.belongs_to.add(BelongsToEdge(book_id, genre_id))

    @staticmethod
    def _require(nodes: dict[str, Props], node_id: str) -> None:
        if node_id not in nodes:
            raise KeyError(f"Unknown node: {node_id}")

    # -- Traversal helpers --------------------------------------------------
    def ratings_by(self, user_id: str) -> dict[str, int]:
        return {b: e.rating for (u, b), e in self.reads.items() if u == user_id}

    def readers_of(self, book_id: str) -> dict[str, int]:
        return {u: e.rating for (u, b), e in self.reads.items() if b == book_id}

    def wished_by(self, user_id: str) -> set[str]:
        return {b for (u, b) in self.wishlist if u == user_id}

    def followed_by(self, user_id: str) -> set[str]:
        return {f for (u, f) in self.follows if u == user_id and f != user_id}

    def authors_of(self, book_id: str) -> list[str]:
        return sorted(e.author_id for e in self.wrote if e.book_id == book_id)

    def books_of(self, author_id: str) -> list[str]:
        return sorted(e.book_id for e in self.wrote if e.author_id == author_id)

    def genres_of(self, book_id: str) -> list[str]:
        return sorted(e.genre_id for e in self.belongs_to if e.book_id == book_id)


# =========================================================================
# Query handlers, one per named query
# =========================================================================
def _collaborative(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    user_id, min_rating = params["userId"], params["minRating"]
    if user_id not in g.users:
        return []
    mine = g.ratings_by(user_id)
    wished = g.wished_by(user_id)

    peers: set[str] = set()
    for book_id in mine:
        peers.update(g.readers_of(book_id))
    peers.discard(user_id)

    ratings: dict[str, list[int]] = defaultdict(list)
    for peer in peers:
        for book_id, rating in g.ratings_by(peer).items():
            if rating >= min_rating and book_id not in mine and book_id not in wished:
                ratings[book_id].append(rating)

    return [
        {"rec": g.books[bid], "commonReaders": len(r), "avgRating": mean(r)}
        for bid, r in sorted(ratings.items())
    ]


def _genre(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    user = g.users.get(params["userId"])
    if user is None:
        return []
    names = set(user["preferredGenres"] or [])
    matching = {gid for gid, props in g.genres.items() if props["name"] in names}
    excluded = set(g.ratings_by(user["id"])) | g.wished_by(user["id"])

    matches: dict[str, set[str]] = defaultdict(set)
    for edge in g.belongs_to:
        if edge.genre_id in matching and edge.book_id not in excluded:
            matches[edge.book_id].add(edge.genre_id)

    return [
        {"b": g.books[bid], "genreMatches": len(gids)}
        for bid, gids in sorted(matches.items())
    ]


def _social(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    user_id, min_rating = params["userId"], params["minRating"]
    if user_id not in g.users:
        return []
    excluded = set(g.ratings_by(user_id)) | g.wished_by(user_id)

    endorsements: dict[str, dict[str, int]] = defaultdict(dict)
    for followed in g.followed_by(user_id):
        username = g.users[followed]["username"]
        for book_id, rating in g.ratings_by(followed).items():
            if rating >= min_rating and book_id not in excluded:
                endorsements[book_id][username] = rating

    return [
        {
            "b": g.books[bid],
            "recommenders": sorted(by_user),
            "avgRating": mean(by_user.values()),
        }
        for bid, by_user in sorted(endorsements.items())
    ]


def _author(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    user_id, min_rating = params["userId"], params["minRating"]
    mine = g.ratings_by(user_id)

    best: dict[tuple[str, str], int] = {}
    for book_id, rating in mine.items():
        if rating < min_rating:
            continue
        for author_id in g.authors_of(book_id):
            for other in g.books_of(author_id):
                if other in mine:
                    continue
                key = (other, author_id)
                best[key] = max(best.get(key, rating), rating)

    return [
        {
            "other": g.books[other],
            "authorId": author_id,
            "authorName": g.authors[author_id]["name"],
            "userRating": rating,
        }
        for (other, author_id), rating in sorted(best.items())
    ]


def _trending(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    ratings: dict[str, list[int]] = defaultdict(list)
    for edge in g.reads.values():
        ratings[edge.book_id].append(edge.rating)
    return [
        {"b": g.books[bid], "readers": len(r), "avgRating": mean(r)}
        for bid, r in sorted(ratings.items())
        if len(r) >= params["minReaders"]
    ]


def _similar(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    book_id = params["bookId"]
    edges = [e for e in g.similar if e.source_id == book_id and e.target_id != book_id]
    edges.sort(key=lambda e: (-e.score, e.target_id))
    return [{"similar": g.books[e.target_id], "score": e.score} for e in edges]


def _by_rating(books: list[Props]) -> list[Props]:
    return sorted(books, key=lambda b: (-(b.get("rating") or 0.0), b["id"]))


def _search_books(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    needle = params["query"].lower()
    hits = [
        b for b in g.books.values()
        if needle in (b.get("title") or "").lower()
        or needle in (b.get("description") or "").lower()
    ]
    return [{"b": b} for b in _by_rating(hits)[: params["limit"]]]


def _books_by_genre(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    ids = {e.book_id for e in g.belongs_to if e.genre_id == params["genreId"]}
    return [{"b": b} for b in _by_rating([g.books[i] for i in ids])]


def _books_by_author(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    books = [g.books[i] for i in g.books_of(params["authorId"])]
    # Cypher sorts nulls first when descending.
    books.sort(
        key=lambda b: (b.get("publishedYear") is None, b.get("publishedYear") or 0),
        reverse=True,
    )
    return [{"b": b} for b in books]


def _top_rated(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    return [{"b": b} for b in _by_rating(list(g.books.values()))[: params["limit"]]]


def _book_details(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    book = g.books.get(params["bookId"])
    if book is None:
        return []
    placeholder = [{"id": None, "name": None}]
    authors = [
        {"id": a, "name": g.authors[a]["name"]} for a in g.authors_of(book["id"])
    ]
    genres = [
        {"id": gid, "name": g.genres[gid]["name"]} for gid in g.genres_of(book["id"])
    ]
    return [{"b": book, "authors": authors or placeholder, "genres": genres or placeholder}]


def _user_activity(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    user = g.users.get(params["userId"])
    if user is None:
        return []
    user_id = user["id"]
    return [
        {
            "u": user,
            "booksRead": len(g.ratings_by(user_id)),
            "followers": sum(1 for (_, f) in g.follows if f == user_id),
            "following": len(g.followed_by(user_id)),
        }
    ]


def _reading_history(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    edges = sorted(
        (e for e in g.reads.values() if e.user_id == params["userId"]),
        key=lambda e: e.book_id,
    )
    edges.sort(key=lambda e: e.read_date, reverse=True)
    return [
        {
            "b": g.books[e.book_id],
            "rating": e.rating,
            "readDate": e.read_date,
            "review": e.review,
        }
        for e in edges
    ]


def _popular_genres(g: InMemoryGraph, params: dict[str, Any]) -> list[Row]:
    readers: dict[str, set[str]] = defaultdict(set)
    for edge in g.belongs_to:
        readers[edge.genre_id].update(g.readers_of(edge.book_id))
    ranked = sorted(
        ((gid, users) for gid, users in readers.items() if users),
        key=lambda item: (-len(item[1]), item[0]),
    )
    return [
        {"g": g.genres[gid], "readers": len(users)}
        for gid, users in ranked[: params["limit"]]
    ]


Handler = Callable[[InMemoryGraph, dict[str, Any]], list[Row]]

HANDLERS: dict[str, Handler] = {
    queries.COLLABORATIVE_CANDIDATES.name: _collaborative,
    queries.GENRE_CANDIDATES.name: _genre,
    queries.SOCIAL_CANDIDATES.name: _social,
    queries.AUTHOR_CANDIDATES.name: _author,
    queries.TRENDING_CANDIDATES.name: _trending,
    queries.SIMILAR_BOOKS.name: _similar,
    queries.SEARCH_BOOKS.name: _search_books,
    queries.BOOKS_BY_GENRE.name: _books_by_genre,
    queries.BOOKS_BY_AUTHOR.name: _books_by_author,
    queries.TOP_RATED_BOOKS.name: _top_rated,
    queries.BOOK_DETAILS.name: _book_details,
    queries.USER_ACTIVITY.name: _user_activity,
    queries.READING_HISTORY.name: _reading_history,
    queries.POPULAR_GENRES.name: _popular_genres,
}


class InMemoryQueryExecutor(IQueryExecutor):
    """Deterministic executor over an :class:`InMemoryGraph`.

    ``pool_size`` bounds concurrent queries the way a driver's connection
    pool does; a query that cannot get a slot within ``acquire_timeout``
    seconds fails with :class:`ExecutorUnavailableError`.
    """

    def __init__(
        self,
        graph: Optional[InMemoryGraph] = None,
        pool_size: int = 10,
        acquire_timeout: float = 5.0,
    ):
        self.graph = graph or InMemoryGraph()
        self.pool = asyncio.Semaphore(pool_size)
        self.acquire_timeout = acquire_timeout
        self.queries_run = 0
        self._closed = False

    async def execute(self, query: GraphQuery, params: dict[str, Any]) -> list[Row]:
        handler = HANDLERS.get(query.name)
        if handler is None:
            raise UnsupportedQueryError(query.name)
        if self._closed:
            raise ExecutorUnavailableError("In-memory executor is closed")

        try:
            await asyncio.wait_for(self.pool.acquire(), timeout=self.acquire_timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("In-memory pool exhausted for query %s", query.name)
            raise ExecutorUnavailableError("In-memory connection pool exhausted") from exc

        try:
            logger.debug("Running query %s with params %s", query.name, params)
            self.queries_run += 1
            await asyncio.sleep(0)
            rows = handler(self.graph, params)
        finally:
            self.pool.release()
        return copy.deepcopy(rows)

    async def close(self) -> None:
        self._closed = True
