"""Recommendation API routes.

Each route forwards to one :class:`IRecommendationService` operation.  An
empty ``recommendations`` list means "nothing to suggest yet", never an
error.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from shelfgraph.api.schemas import RecommendationResponse, RecommendedBookResponse
from shelfgraph.core.dependencies import get_recommendation_service
from shelfgraph.domain.entities import RecommendationResult
from shelfgraph.domain.repositories import IRecommendationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recommendations", tags=["recommendations"])

Service = Annotated[IRecommendationService, Depends(get_recommendation_service)]


def _respond(strategy: str, results: list[RecommendationResult]) -> RecommendationResponse:
    recs = [RecommendedBookResponse.model_validate(r) for r in results]
    return RecommendationResponse(recommendations=recs, total=len(recs), strategy=strategy)


@router.get("/users/{user_id}", response_model=RecommendationResponse)
async def recommend_for_user(
    user_id: str,
    service: Service,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> RecommendationResponse:
    """Collaborative filtering: what readers with overlapping history liked."""
    return _respond("collaborative", await service.recommend_for_user(user_id, limit))


@router.get("/users/{user_id}/genres", response_model=RecommendationResponse)
async def recommend_by_preferred_genres(
    user_id: str,
    service: Service,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> RecommendationResponse:
    return _respond("genre", await service.recommend_by_preferred_genres(user_id, limit))


@router.get("/users/{user_id}/following", response_model=RecommendationResponse)
async def recommend_from_following(
    user_id: str,
    service: Service,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> RecommendationResponse:
    return _respond("social", await service.recommend_from_following(user_id, limit))


@router.get("/users/{user_id}/authors", response_model=RecommendationResponse)
async def recommend_by_favorite_authors(
    user_id: str,
    service: Service,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> RecommendationResponse:
    return _respond("author", await service.recommend_by_favorite_authors(user_id, limit))


@router.get("/users/{user_id}/hybrid", response_model=RecommendationResponse)
async def hybrid_recommendations(
    user_id: str,
    service: Service,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> RecommendationResponse:
    """Collaborative, genre and author candidates merged and ranked by book rating.

    Does not fall back to trending; call ``/recommendations/trending``
    explicitly when this comes back empty.
    """
    return _respond("hybrid", await service.hybrid_recommendations(user_id, limit))


@router.get("/books/{book_id}/similar", response_model=RecommendationResponse)
async def recommend_from_book(
    book_id: str,
    service: Service,
    limit: Annotated[int, Query(ge=1, le=100)] = 5,
) -> RecommendationResponse:
    return _respond("similarity", await service.recommend_from_book(book_id, limit))


@router.get("/trending", response_model=RecommendationResponse)
async def trending_books(
    service: Service,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> RecommendationResponse:
    return _respond("trending", await service.trending_books(limit))
