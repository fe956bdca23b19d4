"""Domain entities for ShelfGraph.

All entities are read-only snapshots of graph nodes and relationships.  The
recommendation core never mutates them.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    published_year: Optional[int] = None
    pages: Optional[int] = None
    isbn: str = ""
    rating: float = 0.0  # 0.0 - 5.0
    description: str = ""


@dataclass(frozen=True)
class Author:
    id: str
    name: str
    birth_year: Optional[int] = None
    nationality: str = ""


@dataclass(frozen=True)
class Genre:
    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str = ""
    created_at: str = ""  # ISO date
    # Genre *names*, not ids: a renamed genre silently stops matching.
    preferred_genres: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ReadEdge:
    """(User)-[:READ]->(Book)"""

    user_id: str
    book_id: str
    rating: int  # 1 - 5
    read_date: str = ""
    review: str = ""


@dataclass(frozen=True)
class WantsToReadEdge:
    """(User)-[:WANTS_TO_READ]->(Book)"""

    user_id: str
    book_id: str
    added_date: str = ""


@dataclass(frozen=True)
class FollowsEdge:
    """(User)-[:FOLLOWS]->(User), directed and not necessarily mutual."""

    follower_id: str
    followed_id: str


@dataclass(frozen=True)
class SimilarToEdge:
    """(Book)-[:SIMILAR_TO]->(Book) with a 0.0 - 1.0 score."""

    source_id: str
    target_id: str
    score: float


@dataclass(frozen=True)
class WroteEdge:
    author_id: str
    book_id: str


@dataclass(frozen=True)
class BelongsToEdge:
    book_id: str
    genre_id: str


# ---------------------------------------------------------------------------
# Composite views
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class EntityRef:
    """Lightweight ``{id, name}`` reference embedded in composite views."""

    id: str
    name: str


@dataclass(frozen=True)
class BookWithDetails:
    book: Book
    authors: list[EntityRef] = field(default_factory=list)
    genres: list[EntityRef] = field(default_factory=list)


@dataclass(frozen=True)
class UserWithActivity:
    user: User
    books_read: int = 0
    followers: int = 0
    following: int = 0


@dataclass(frozen=True)
class ReadingHistoryEntry:
    book: Book
    rating: int
    read_date: str = ""
    review: str = ""


@dataclass(frozen=True)
class GenreWithStats:
    genre: Genre
    readers: int = 0


@dataclass(frozen=True)
class RecommendationResult:
    """A single ranked recommendation.  Built per call, never persisted."""

    book: Book
    score: float
    reason: str
