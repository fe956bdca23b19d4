"""Row-to-entity projection.

Rows come from :class:`~shelfgraph.domain.repositories.IQueryExecutor` as
plain dicts; node values are property bags using the graph's camelCase keys.
This is the only place numbers are coerced: scores become ``float`` and
counts become ``int``.
"""

from typing import Any, Iterable, Optional

from shelfgraph.domain.entities import (
    Author,
    Book,
    BookWithDetails,
    EntityRef,
    Genre,
    GenreWithStats,
    ReadingHistoryEntry,
    User,
    UserWithActivity,
)

Props = Optional[dict[str, Any]]


def as_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    return int(value)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def to_book(props: Props) -> Optional[Book]:
    if not props or props.get("id") is None:
        return None
    return Book(
        id=str(props["id"]),
        title=props.get("title") or "",
        published_year=_optional_int(props.get("publishedYear")),
        pages=_optional_int(props.get("pages")),
        isbn=props.get("isbn") or "",
        rating=as_float(props.get("rating")),
        description=props.get("description") or "",
    )


def to_author(props: Props) -> Optional[Author]:
    if not props or props.get("id") is None:
        return None
    return Author(
        id=str(props["id"]),
        name=props.get("name") or "",
        birth_year=_optional_int(props.get("birthYear")),
        nationality=props.get("nationality") or "",
    )


def to_genre(props: Props) -> Optional[Genre]:
    if not props or props.get("id") is None:
        return None
    return Genre(
        id=str(props["id"]),
        name=props.get("name") or "",
        description=props.get("description") or "",
    )


def to_user(props: Props) -> Optional[User]:
    if not props or props.get("id") is None:
        return None
    return User(
        id=str(props["id"]),
        username=props.get("username") or "",
        email=props.get("email") or "",
        created_at=str(props.get("createdAt") or ""),
        preferred_genres=tuple(props.get("preferredGenres") or ()),
    )


def to_refs(items: Optional[Iterable[Props]]) -> list[EntityRef]:
    """Project a ``collect({id, name})`` list.

    ``OPTIONAL MATCH`` + ``collect`` yields a single ``{id: null}``
    placeholder when nothing matched; such entries are dropped.
    """
    refs = []
    for item in items or []:
        if not item or item.get("id") is None:
            continue
        refs.append(EntityRef(id=str(item["id"]), name=item.get("name") or ""))
    return refs


def to_book_with_details(row: dict[str, Any]) -> Optional[BookWithDetails]:
    book = to_book(row.get("b"))
    if book is None:
        return None
    return BookWithDetails(
        book=book,
        authors=to_refs(row.get("authors")),
        genres=to_refs(row.get("genres")),
    )


def to_user_with_activity(row: dict[str, Any]) -> Optional[UserWithActivity]:
    user = to_user(row.get("u"))
    if user is None:
        return None
    return UserWithActivity(
        user=user,
        books_read=as_int(row.get("booksRead")),
        followers=as_int(row.get("followers")),
        following=as_int(row.get("following")),
    )


def to_reading_entry(row: dict[str, Any]) -> Optional[ReadingHistoryEntry]:
    book = to_book(row.get("b"))
    if book is None:
        return None
    return ReadingHistoryEntry(
        book=book,
        rating=as_int(row.get("rating")),
        read_date=str(row.get("readDate") or ""),
        review=row.get("review") or "",
    )


def to_genre_with_stats(row: dict[str, Any]) -> Optional[GenreWithStats]:
    genre = to_genre(row.get("g"))
    if genre is None:
        return None
    return GenreWithStats(genre=genre, readers=as_int(row.get("readers")))


def books_from_rows(rows: Iterable[dict[str, Any]], key: str = "b") -> list[Book]:
    """Project one book column, skipping rows whose node is missing."""
    books = []
    for row in rows:
        book = to_book(row.get(key))
        if book is not None:
            books.append(book)
    return books
