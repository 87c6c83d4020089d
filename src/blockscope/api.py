"""HTTP surface for blockscope.

Routes (all GET, mounted under /api/v1/explorer):
    /blocks/encoded?start&end   Delta-encoded volume series (cache first)
    /blocks?start&end           Raw block records from the explorer API
    /data                       Explorer table data

Run with any ASGI server, e.g.:
    uvicorn blockscope.api:app
"""

import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blockscope.cache import SQLiteCacheReader, open_cache_connection
from blockscope.clients import ExplorerClient, UpstreamUnavailable
from blockscope.config import settings
from blockscope.models import BlockRange
from blockscope.pipeline import RangeOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/explorer")


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@router.get("/data")
async def get_explorer_data(request: Request):
    """Proxy the explorer table data."""
    orchestrator: RangeOrchestrator = request.app.state.orchestrator
    try:
        return await orchestrator.client.get_explorer_data()
    except UpstreamUnavailable as e:
        logger.error("Error fetching explorer data: %s", e)
        return _error(500, "Failed to fetch explorer data", str(e))


@router.get("/blocks")
async def get_blocks(
    request: Request,
    start: Optional[str] = Query(None, description="First block number"),
    end: Optional[str] = Query(None, description="Last block number"),
):
    """Proxy raw block records. Both bounds are required here."""
    block_range = BlockRange.from_query(start, end)
    if not block_range.is_bounded:
        return _error(400, "Pass valid start and end query params as part of the request")

    orchestrator: RangeOrchestrator = request.app.state.orchestrator
    try:
        return await orchestrator.client.get_blocks(block_range.start, block_range.end)
    except UpstreamUnavailable as e:
        logger.error("Error fetching block data: %s", e)
        return _error(500, "Failed to fetch block data", str(e))


@router.get("/blocks/encoded")
async def get_encoded_blocks(
    request: Request,
    start: Optional[str] = Query(None, description="First block number"),
    end: Optional[str] = Query(None, description="Last block number"),
):
    """Delta-encoded volume series. Invalid bounds fall back to the default window."""
    block_range = BlockRange.from_query(start, end)
    orchestrator: RangeOrchestrator = request.app.state.orchestrator
    try:
        return await orchestrator.get_encoded_blocks(block_range.start, block_range.end)
    except UpstreamUnavailable as e:
        logger.error("Error fetching block data from API: %s", e)
        return _error(500, "Failed to fetch block data", str(e))


def create_app(orchestrator: RangeOrchestrator | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        orchestrator: Pre-built orchestrator. When None the lifespan opens the
            cache connection and explorer client from settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if orchestrator is not None:
            app.state.orchestrator = orchestrator
            yield
            return

        conn = None
        try:
            conn = open_cache_connection(settings.cache_db_path)
        except sqlite3.Error as e:
            # Reads report CacheUnavailable and fall back to the API
            logger.error("Error connecting to SQLite cache database: %s", e)

        try:
            async with ExplorerClient() as client:
                app.state.orchestrator = RangeOrchestrator(
                    cache=SQLiteCacheReader(conn),
                    client=client,
                )
                yield
        finally:
            if conn is not None:
                conn.close()

    app = FastAPI(title="blockscope", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()
