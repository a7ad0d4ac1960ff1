"""FastAPI dependencies shared by the routes.

Everything long-lived (config, database, LLM client, debug logger) is
built once in the app lifespan and stored on app.state; these helpers hand
it to each request.
"""

from typing import Iterator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from salon_engine.config.models import SystemConfig
from salon_engine.llm.base import BaseLLMClient
from salon_engine.models.user import User
from salon_engine.repositories.user_repository import UserRepository
from salon_engine.services.chat_orchestrator import ChatOrchestrator


def get_system_config(request: Request) -> SystemConfig:
    return request.app.state.system_config


def get_db(request: Request) -> Iterator[Session]:
    """
    Get a database session.

    Usage in FastAPI endpoints:
        @router.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db here
            pass

    Yields:
        Database session
    """
    yield from request.app.state.database.session()


def get_llm_client(request: Request) -> BaseLLMClient:
    llm_client = request.app.state.llm_client
    if llm_client is None:
        raise HTTPException(status_code=503, detail="LLM client not initialized")
    return llm_client


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    system_config: SystemConfig = Depends(get_system_config),
) -> User:
    """
    Resolve the caller from the identity header and upsert their user row.

    Raises:
        HTTPException: 401 if the header is missing
    """
    open_id = request.headers.get(system_config.user_header)
    if not open_id:
        raise HTTPException(status_code=401, detail=f"Missing {system_config.user_header} header")
    return UserRepository(db).upsert(open_id)


def get_chat_orchestrator(
    request: Request,
    db: Session = Depends(get_db),
    llm_client: BaseLLMClient = Depends(get_llm_client),
    system_config: SystemConfig = Depends(get_system_config),
) -> ChatOrchestrator:
    return ChatOrchestrator(
        db=db,
        llm_client=llm_client,
        chat_config=system_config.chat,
        debug_logger=request.app.state.debug_logger,
    )
