"""Pydantic schemas for API responses."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class BookResponse(BaseModel):
    id: str
    title: str
    published_year: Optional[int] = None
    pages: Optional[int] = None
    isbn: str = ""
    rating: float
    description: str = ""

    model_config = ConfigDict(from_attributes=True)


class BookListResponse(BaseModel):
    books: list[BookResponse]
    total: int


class EntityRefResponse(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class BookDetailsResponse(BaseModel):
    book: BookResponse
    authors: list[EntityRefResponse]
    genres: list[EntityRefResponse]

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    created_at: str
    preferred_genres: list[str]

    model_config = ConfigDict(from_attributes=True)


class UserActivityResponse(BaseModel):
    user: UserResponse
    books_read: int
    followers: int
    following: int

    model_config = ConfigDict(from_attributes=True)


class ReadingHistoryEntryResponse(BaseModel):
    book: BookResponse
    rating: int
    read_date: str
    review: str

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Genres
# ---------------------------------------------------------------------------
class GenreResponse(BaseModel):
    id: str
    name: str
    description: str = ""

    model_config = ConfigDict(from_attributes=True)


class GenreStatsResponse(BaseModel):
    genre: GenreResponse
    readers: int

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------
class RecommendedBookResponse(BaseModel):
    book: BookResponse
    score: float
    reason: str

    model_config = ConfigDict(from_attributes=True)


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendedBookResponse]
    total: int
    strategy: str
