"""Ports for dependency inversion.

The recommendation core only ever talks to the graph through
:class:`IQueryExecutor`; connection pooling, sessions and drivers belong to
the adapters in ``shelfgraph/infrastructure/graph/``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from shelfgraph.domain.entities import RecommendationResult

Row = dict[str, Any]


@dataclass(frozen=True)
class GraphQuery:
    """A named, parameterised graph query.

    ``outputs`` lists the column names every returned row is keyed by.
    Parameters are always bound by the executor, never formatted into
    ``cypher``.
    """

    name: str
    cypher: str
    outputs: tuple[str, ...]
    description: str = ""
    version: str = "1.0"


class IQueryExecutor(ABC):

    @abstractmethod
    async def execute(self, query: GraphQuery, params: dict[str, Any]) -> list[Row]:
        """Run ``query`` with ``params`` and return its rows.

        Each call acquires its own backend resource and releases it before
        returning, whether the query succeeded or not.  Raises
        :class:`~shelfgraph.domain.exceptions.ExecutorUnavailableError` when
        no resource can be acquired.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class IRecommendationService(ABC):

    @abstractmethod
    async def recommend_for_user(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        """Collaborative filtering through peer readers."""
        pass

    @abstractmethod
    async def recommend_from_book(
        self, book_id: str, limit: int = 5
    ) -> list[RecommendationResult]:
        pass

    @abstractmethod
    async def recommend_by_preferred_genres(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        pass

    @abstractmethod
    async def recommend_from_following(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        pass

    @abstractmethod
    async def recommend_by_favorite_authors(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        pass

    @abstractmethod
    async def trending_books(self, limit: int = 10) -> list[RecommendationResult]:
        """Non-personalised fallback; callers opt into it explicitly."""
        pass

    @abstractmethod
    async def hybrid_recommendations(
        self, user_id: str, limit: int = 10
    ) -> list[RecommendationResult]:
        pass
