"""FastAPI application for Salon Engine."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from salon_engine.api.routes import router
from salon_engine.config import ConfigLoader, SystemConfig
from salon_engine.db import Database
from salon_engine.llm import BaseLLMClient, create_llm_client
from salon_engine.services.exceptions import NotFoundError, ValidationFailure, UpstreamFailure
from salon_engine.utils.debug_logger import DebugLogger

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    llm_available: bool


def create_app(
    system_config: Optional[SystemConfig] = None,
    database: Optional[Database] = None,
    llm_client: Optional[BaseLLMClient] = None,
    debug_logger: Optional[DebugLogger] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    Anything not passed in is built from the system config at startup and
    released at shutdown. Injected collaborators are used as-is and left
    open for the caller.

    Args:
        system_config: Loaded config (read from config/system.yaml if omitted)
        database: Database to use
        llm_client: LLM client to use
        debug_logger: JSONL interaction logger to use

    Returns:
        Configured FastAPI app
    """
    if system_config is None:
        system_config = ConfigLoader().load_system_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown logic."""
        logger.info("Starting Salon Engine...")

        owns_database = database is None
        owns_llm_client = llm_client is None

        db = database or Database(system_config.database.url, echo=system_config.database.echo)
        db.init()
        logger.info("✓ Database initialized")

        client = llm_client or create_llm_client(system_config.llm)
        if owns_llm_client:
            if await client.health_check():
                logger.info(f"✓ Connected to LLM: {system_config.llm.model}")
            else:
                logger.warning(f"⚠ LLM not available at {system_config.llm.base_url}")

        app.state.system_config = system_config
        app.state.database = db
        app.state.llm_client = client
        app.state.debug_logger = debug_logger or DebugLogger(enabled=system_config.debug)
        logger.info(f"Debug logging: {'enabled' if system_config.debug else 'disabled'}")

        yield

        logger.info("Shutting down Salon Engine...")
        if owns_llm_client:
            await client.close()
        if owns_database:
            db.dispose()

    app = FastAPI(
        title="Salon Engine",
        description="AI character chat with knowledge retrieval and group discussions",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=system_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(request: Request, exc: ValidationFailure):
        return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(UpstreamFailure)
    async def upstream_failure_handler(request: Request, exc: UpstreamFailure):
        # Provider details stay in the server log
        return JSONResponse(status_code=502, content={"detail": "Failed to generate response"})

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Check system health."""
        client = request.app.state.llm_client
        llm_available = await client.health_check() if client else False
        return HealthResponse(status="healthy", llm_available=llm_available)

    app.include_router(router)

    return app
