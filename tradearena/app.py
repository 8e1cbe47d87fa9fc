"""FastAPI application factory."""

import logging
import random
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradearena.config import Config
from tradearena.errors import CompetitionNotFoundError, InvalidRequestError
from tradearena.api import router, feed_router
from tradearena.services import BroadcastHub, CompetitionStore, PeriodicTask, ScoreMutator
from tradearena.storage import CompetitionRepository, JsonFileRepository

logger = logging.getLogger(__name__)


def create_app(
    config: Config | None = None,
    repository: Optional[CompetitionRepository] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.
    
    Args:
        config: Application configuration. If None, loads from environment.
        repository: Durable store. If None, a JSON file at ``config.data_path``.
        
    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = Config.from_env()
    if repository is None:
        repository = JsonFileRepository(config.data_path)
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        # Startup
        logger.info("Starting Trade Arena API")
        store = CompetitionStore.load(
            config,
            repository=repository,
            started_at=datetime.now(timezone.utc),
        )
        hub = BroadcastHub(store, max_pending=config.outbound_queue_size)
        mutator = ScoreMutator(store, hub, rng=random.Random(config.random_seed))
        ticker = PeriodicTask(config.score_interval_seconds, mutator.tick, name="score-mutator")
        
        app.state.store = store
        app.state.hub = hub
        app.state.mutator = mutator
        ticker.start()
        
        yield
        
        # Shutdown
        logger.info("Shutting down...")
        await ticker.stop()
        await hub.close()
    
    app = FastAPI(
        title="Trade Arena API",
        description="Trading competitions with a live leaderboard feed",
        version="1.0.0",
        lifespan=lifespan,
    )
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    @app.exception_handler(CompetitionNotFoundError)
    async def not_found_handler(request: Request, exc: CompetitionNotFoundError):
        return JSONResponse(status_code=404, content={"message": "competition not found"})
    
    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        return JSONResponse(status_code=400, content={"message": str(exc)})
    
    # Include API routes
    app.include_router(router)
    app.include_router(feed_router)
    
    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}
    
    return app
