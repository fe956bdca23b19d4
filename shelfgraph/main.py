"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shelfgraph.api.catalog_routes import router as catalog_router
from shelfgraph.api.recommendation_routes import router as recommendation_router
from shelfgraph.core.config import settings
from shelfgraph.core.dependencies import build_query_executor
from shelfgraph.domain.exceptions import ExecutorUnavailableError, MalformedInputError

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting ShelfGraph (graph backend: %s)", settings.graph_backend)
    app.state.query_executor = build_query_executor(settings)
    yield
    logger.info("Shutting down ShelfGraph")
    await app.state.query_executor.close()


app = FastAPI(
    title="ShelfGraph",
    description="Graph-backed personal library with multi-strategy recommendations",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recommendation_router)
app.include_router(catalog_router)


@app.exception_handler(MalformedInputError)
async def malformed_input_handler(request: Request, exc: MalformedInputError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ExecutorUnavailableError)
async def executor_unavailable_handler(
    request: Request, exc: ExecutorUnavailableError
) -> JSONResponse:
    logger.warning("Graph backend unavailable on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Graph database temporarily unavailable, retry later"},
        headers={"Retry-After": "1"},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
