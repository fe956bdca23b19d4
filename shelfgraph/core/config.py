"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    graph_backend: Literal["memory", "neo4j"] = "memory"
    neo4j_uri: str = "neo4j://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = ""
    neo4j_database: str = "neo4j"
    neo4j_max_pool_size: int = 10
    neo4j_acquisition_timeout: float = 30.0  # seconds
    memory_pool_size: int = 10
    memory_seed_demo_data: bool = True
    min_liked_rating: int = 4  # READ ratings at or above this count as "liked"
    trending_min_readers: int = 2
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "SHELFGRAPH_"}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
