"""Neo4j-backed query executor.

One :class:`neo4j.AsyncDriver` (and therefore one connection pool) is shared
per process.  Every :meth:`Neo4jQueryExecutor.execute` call opens its own
session and closes it on the way out, so a failed query never leaks a pooled
connection.
"""

import logging
from typing import Any, Optional

from neo4j import AsyncDriver, AsyncGraphDatabase
from neo4j.exceptions import ClientError, ServiceUnavailable, SessionExpired, TransientError

from shelfgraph.domain.exceptions import ExecutorUnavailableError
from shelfgraph.domain.repositories import GraphQuery, IQueryExecutor, Row

logger = logging.getLogger(__name__)

# neo4j 5.x raises a bare ClientError with this text when
# connection_acquisition_timeout elapses (neo4j/_async/io/_pool.py).
POOL_EXHAUSTED_MARKER = "failed to obtain a connection from the pool"


def _plain(value: Any) -> Any:
    """Convert driver-specific values to plain Python values.

    ``neo4j.time`` temporals become ISO strings; containers are walked.
    """
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if hasattr(value, "iso_format"):
        return value.iso_format()
    return value


def _is_pool_exhausted(exc: ClientError) -> bool:
    return POOL_EXHAUSTED_MARKER in str(exc)


class Neo4jQueryExecutor(IQueryExecutor):
    """Runs :class:`GraphQuery` objects against a Neo4j database."""

    def __init__(self, driver: AsyncDriver, database: Optional[str] = None):
        self._driver = driver
        self._database = database

    @classmethod
    def connect(
        cls,
        uri: str,
        user: str,
        password: str,
        database: Optional[str] = None,
        max_pool_size: int = 10,
        acquisition_timeout: float = 30.0,
    ) -> "Neo4jQueryExecutor":
        driver = AsyncGraphDatabase.driver(
            uri,
            auth=(user, password),
            max_connection_pool_size=max_pool_size,
            connection_acquisition_timeout=acquisition_timeout,
        )
        logger.info("Neo4j driver created for %s (pool size %d)", uri, max_pool_size)
        return cls(driver, database=database)

    async def execute(self, query: GraphQuery, params: dict[str, Any]) -> list[Row]:
        logger.debug("Running query %s with params %s", query.name, params)
        try:
            async with self._driver.session(database=self._database) as session:
                result = await session.run(query.cypher, params)
                records = await result.data()
        except (ServiceUnavailable, SessionExpired, TransientError) as exc:
            logger.warning("Neo4j unavailable for query %s: %s", query.name, exc)
            raise ExecutorUnavailableError(f"Graph database unavailable: {exc}") from exc
        except ClientError as exc:
            if not _is_pool_exhausted(exc):
                raise
            logger.warning("Neo4j connection pool exhausted for query %s", query.name)
            raise ExecutorUnavailableError("Graph database connection pool exhausted") from exc

        return [{key: _plain(value) for key, value in record.items()} for record in records]

    async def close(self) -> None:
        await self._driver.close()
        logger.info("Neo4j driver closed")
