"""Multi-strategy recommendation engine for ShelfGraph.

Six independent signal generators, each a single graph traversal scored in
Python, plus a hybrid aggregator that merges three of them:

  1. Collaborative (peer readers)
  2. Genre affinity (preferred genre names)
  3. Social (one hop along FOLLOWS)
  4. Author affinity (authors of highly rated books)
  5. Trending (global, non-personalised)
  6. Book similarity (precomputed SIMILAR_TO edges)

Every generator returns its full ranked candidate pool; the service applies
the caller's limit.  Sorting is stable, so equal scores keep the executor's
row order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from shelfgraph.domain.entities import RecommendationResult
from shelfgraph.domain.exceptions import MalformedInputError
from shelfgraph.domain.projection import as_float, as_int, to_book
from shelfgraph.domain.repositories import IQueryExecutor, IRecommendationService
from shelfgraph.infrastructure.graph.queries import (
    AUTHOR_CANDIDATES,
    COLLABORATIVE_CANDIDATES,
    GENRE_CANDIDATES,
    SIMILAR_BOOKS,
    SOCIAL_CANDIDATES,
    TRENDING_CANDIDATES,
)

logger = logging.getLogger(__name__)

HYBRID_REASON = "Personalized recommendation based on your reading history"
SIMILAR_REASON = "Similar to a book you viewed"


def _rank(results: list[RecommendationResult]) -> list[RecommendationResult]:
    return sorted(results, key=lambda r: r.score, reverse=True)


# ======================================================================
# Strategy 1 -- Collaborative filtering
# ======================================================================
class CollaborativeEngine:
    """Books liked by users who share at least one read book with the target."""

    COMMON_READER_WEIGHT = 0.4
    RATING_WEIGHT = 0.6

    def __init__(self, executor: IQueryExecutor, min_rating: int):
        self.executor = executor
        self.min_rating = min_rating

    async def candidates(self, user_id: str) -> list[RecommendationResult]:
        rows = await self.executor.execute(
            COLLABORATIVE_CANDIDATES, {"userId": user_id, "minRating": self.min_rating}
        )
        results = []
        for row in rows:
            book = to_book(row.get("rec"))
            if book is None:
                continue
            common = as_int(row.get("commonReaders"))
            avg_rating = as_float(row.get("avgRating"))
            score = common * self.COMMON_READER_WEIGHT + avg_rating * self.RATING_WEIGHT
            results.append(
                RecommendationResult(
                    book=book,
                    score=score,
                    reason=f"Recommended by {common} users with similar taste",
                )
            )
        return _rank(results)


# ======================================================================
# Strategy 2 -- Genre affinity
# ======================================================================
class GenreAffinityEngine:
    """Books in the user's preferred genres; overlap outweighs raw rating."""

    MATCH_WEIGHT = 2

    def __init__(self, executor: IQueryExecutor):
        self.executor = executor

    async def candidates(self, user_id: str) -> list[RecommendationResult]:
        rows = await self.executor.execute(GENRE_CANDIDATES, {"userId": user_id})
        results = []
        for row in rows:
            book = to_book(row.get("b"))
            if book is None:
                continue
            matches = as_int(row.get("genreMatches"))
            results.append(
                RecommendationResult(
                    book=book,
                    score=float(matches * self.MATCH_WEIGHT) + book.rating,
                    reason=f"Matches {matches} of your preferred genres",
                )
            )
        return _rank(results)


# ======================================================================
# Strategy 3 -- Social graph
# ======================================================================
class SocialEngine:
    """Books liked by the users the target follows (not transitive)."""

    def __init__(self, executor: IQueryExecutor, min_rating: int):
        self.executor = executor
        self.min_rating = min_rating

    async def candidates(self, user_id: str) -> list[RecommendationResult]:
        rows = await self.executor.execute(
            SOCIAL_CANDIDATES, {"userId": user_id, "minRating": self.min_rating}
        )
        scored: list[tuple[float, int, RecommendationResult]] = []
        for row in rows:
            book = to_book(row.get("b"))
            recommenders = [name for name in row.get("recommenders") or [] if name]
            if book is None or not recommenders:
                continue
            avg_rating = as_float(row.get("avgRating"))
            result = RecommendationResult(
                book=book,
                score=avg_rating,
                reason=f"Liked by {', '.join(recommenders)}",
            )
            scored.append((avg_rating, len(recommenders), result))

        # Average rating first, then breadth of endorsement.
        scored.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return [result for _, _, result in scored]


# ======================================================================
# Strategy 4 -- Author affinity
# ======================================================================
class AuthorAffinityEngine:
    """Unread books by authors whose work the user rated highly.

    A co-authored book appears once per qualifying author.  The hybrid
    aggregator deduplicates; the single-strategy call does not.
    """

    def __init__(self, executor: IQueryExecutor, min_rating: int):
        self.executor = executor
        self.min_rating = min_rating

    async def candidates(self, user_id: str) -> list[RecommendationResult]:
        rows = await self.executor.execute(
            AUTHOR_CANDIDATES, {"userId": user_id, "minRating": self.min_rating}
        )
        results = []
        for row in rows:
            book = to_book(row.get("other"))
            if book is None:
                continue
            results.append(
                RecommendationResult(
                    book=book,
                    score=as_float(row.get("userRating")),
                    reason=f"More from {row.get('authorName') or 'this author'}, an author you enjoyed",
                )
            )
        return _rank(results)


# ======================================================================
# Strategy 5 -- Trending
# ======================================================================
class TrendingEngine:
    """Globally popular books; the fallback when there is no user context."""

    READER_WEIGHT = 0.3
    RATING_WEIGHT = 0.7

    def __init__(self, executor: IQueryExecutor, min_readers: int):
        self.executor = executor
        self.min_readers = min_readers

    async def candidates(self) -> list[RecommendationResult]:
        rows = await self.executor.execute(
            TRENDING_CANDIDATES, {"minReaders": self.min_readers}
        )
        results = []
        for row in rows:
            book = to_book(row.get("b"))
            if book is None:
                continue
            readers = as_int(row.get("readers"))
            avg_rating = as_float(row.get("avgRating"))
            results.append(
                RecommendationResult(
                    book=book,
                    score=readers * self.READER_WEIGHT + avg_rating * self.RATING_WEIGHT,
                    reason=f"Popular: {readers} readers, {avg_rating:.1f} avg rating",
                )
            )
        return _rank(results)


# ======================================================================
# Strategy 6 -- Book similarity
# ======================================================================
class SimilarityEngine:
    """Content-based neighbours of one book via SIMILAR_TO edges."""

    def __init__(self, executor: IQueryExecutor):
        self.executor = executor

    async def candidates(self, book_id: str) -> list[RecommendationResult]:
        rows = await self.executor.execute(SIMILAR_BOOKS, {"bookId": book_id})
        best: dict[str, RecommendationResult] = {}
        for row in rows:
            book = to_book(row.get("similar"))
            if book is None or book.id == book_id:
                continue
            score = as_float(row.get("score"))
            # Parallel edges from external data: keep the strongest.
            if book.id not in best or score > best[book.id].score:
                best[book.id] = RecommendationResult(book=book, score=score, reason=SIMILAR_REASON)
        return _rank(list(best.values()))


# ======================================================================
# Service (the public IRecommendationService)
# ======================================================================
class RecommendationService(IRecommendationService):
    """Per-strategy recommendations plus the hybrid aggregator.

    Stateless: every call issues its own queries and keeps nothing between
    calls.  Input is validated before any query is sent; executor errors
    propagate untouched.
    """

    def __init__(
        self,
        executor: IQueryExecutor,
        min_liked_rating: int = 4,
        trending_min_readers: int = 2,
    ):
        self.executor = executor
        self._collaborative = CollaborativeEngine(executor, min_liked_rating)
        self._genre = GenreAffinityEngine(executor)
        self._social = SocialEngine(executor, min_liked_rating)
        self._author = AuthorAffinityEngine(executor, min_liked_rating)
        self._trending = TrendingEngine(executor, trending_min_readers)
        self._similarity = SimilarityEngine(executor)

    async def recommend_for_user(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        self._validate(user_id=user_id, limit=limit)
        results = await self._collaborative.candidates(user_id)
        return self._finish("collaborative", user_id, results, limit)

    async def recommend_from_book(
        self, book_id: str, limit: int = 5
    ) -> list[RecommendationResult]:
        self._validate(book_id=book_id, limit=limit)
        results = await self._similarity.candidates(book_id)
        return self._finish("similarity", book_id, results, limit)

    async def recommend_by_preferred_genres(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        self._validate(user_id=user_id, limit=limit)
        results = await self._genre.candidates(user_id)
        return self._finish("genre", user_id, results, limit)

    async def recommend_from_following(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        self._validate(user_id=user_id, limit=limit)
        results = await self._social.candidates(user_id)
        return self._finish("social", user_id, results, limit)

    async def recommend_by_favorite_authors(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        self._validate(user_id=user_id, limit=limit)
        results = await self._author.candidates(user_id)
        return self._finish("author", user_id, results, limit)

    async def trending_books(self, limit: int = 10) -> list[RecommendationResult]:
        self._validate(limit=limit)
        results = await self._trending.candidates()
        return self._finish("trending", None, results, limit)

    async def hybrid_recommendations(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        """Union of collaborative, genre and author pools ranked by book rating.

        Per-strategy scores are deliberately replaced with the book's own
        rating so candidates from different strategies are comparable.  An
        empty result is returned as-is; trending is never substituted.
        """
        self._validate(user_id=user_id, limit=limit)

        # Let every sub-query settle before failing so none outlives the call.
        pools = await asyncio.gather(
            self._collaborative.candidates(user_id),
            self._genre.candidates(user_id),
            self._author.candidates(user_id),
            return_exceptions=True,
        )
        for pool in pools:
            if isinstance(pool, BaseException):
                logger.warning("Hybrid sub-query failed for user %s: %s", user_id, pool)
                raise pool
        collaborative, genre, author = pools
        logger.info(
            "Hybrid pools for user %s: collaborative=%d genre=%d author=%d",
            user_id, len(collaborative), len(genre), len(author),
        )

        merged: dict[str, RecommendationResult] = {}
        for candidate in (*collaborative, *genre, *author):
            if candidate.book.id in merged:
                continue
            merged[candidate.book.id] = RecommendationResult(
                book=candidate.book,
                score=candidate.book.rating,
                reason=HYBRID_REASON,
            )
        return self._finish("hybrid", user_id, _rank(list(merged.values())), limit)

    # -- Helpers --
    @staticmethod
    def _validate(limit: Any, **identifiers: Any) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise MalformedInputError(f"limit must be an integer, got {limit!r}")
        if limit < 1:
            raise MalformedInputError(f"limit must be positive, got {limit}")
        for name, value in identifiers.items():
            if not isinstance(value, str) or not value.strip():
                raise MalformedInputError(f"{name} must be a non-empty string")

    @staticmethod
    def _finish(
        strategy: str,
        subject: str | None,
        results: list[RecommendationResult],
        limit: int,
    ) -> list[RecommendationResult]:
        output = results[:limit]
        logger.info(
            "%s recommendations for %s: %d of %d candidates",
            strategy, subject or "everyone", len(output), len(results),
        )
        return output
