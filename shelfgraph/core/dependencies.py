"""Dependency injection container."""

import logging

from fastapi import Depends, Request

from shelfgraph.core.config import Settings, settings
from shelfgraph.domain.repositories import IQueryExecutor, IRecommendationService
from shelfgraph.domain.services import ICatalogService
from shelfgraph.infrastructure.graph.memory import InMemoryGraph, InMemoryQueryExecutor
from shelfgraph.infrastructure.graph.neo4j_executor import Neo4jQueryExecutor
from shelfgraph.infrastructure.graph.seed import load_demo_graph
from shelfgraph.services.catalog_service import CatalogService
from shelfgraph.services.recommendation import RecommendationService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Infrastructure providers
# ---------------------------------------------------------------------------
def build_query_executor(config: Settings = settings) -> IQueryExecutor:
    """Create the configured graph backend.  Called once at startup."""
    if config.graph_backend == "memory":
        graph = load_demo_graph() if config.memory_seed_demo_data else InMemoryGraph()
        return InMemoryQueryExecutor(graph, pool_size=config.memory_pool_size)
    elif config.graph_backend == "neo4j":
        return Neo4jQueryExecutor.connect(
            config.neo4j_uri,
            config.neo4j_user,
            config.neo4j_password,
            database=config.neo4j_database,
            max_pool_size=config.neo4j_max_pool_size,
            acquisition_timeout=config.neo4j_acquisition_timeout,
        )
    raise ValueError(f"Unknown graph backend: {config.graph_backend}")


def get_query_executor(request: Request) -> IQueryExecutor:
    """Return the process-wide executor created in the app lifespan."""
    return request.app.state.query_executor


# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------
def get_recommendation_service(
    executor: IQueryExecutor = Depends(get_query_executor),
) -> IRecommendationService:
    return RecommendationService(
        executor,
        min_liked_rating=settings.min_liked_rating,
        trending_min_readers=settings.trending_min_readers,
    )


def get_catalog_service(
    executor: IQueryExecutor = Depends(get_query_executor),
) -> ICatalogService:
    return CatalogService(executor)
