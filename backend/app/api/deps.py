"""FastAPI dependencies shared by the route modules."""

from __future__ import annotations

import structlog
from fastapi.responses import JSONResponse

from app.config import settings
from app.models.contracts import ErrorResponse
from app.repositories.base import Store
from app.repositories.memory import build_memory_store
from app.repositories.storage import build_object_store

logger = structlog.get_logger()

_store: Store | None = None


def _build_store() -> Store:
    objects = build_object_store()
    if settings.use_database:
        from sqlalchemy.ext.asyncio import create_async_engine

        from app.repositories.sql import build_sql_store

        logger.info("store_backend", backend="sql")
        return build_sql_store(create_async_engine(settings.database_url), objects)
    logger.info("store_backend", backend="memory")
    return build_memory_store(objects)


def get_store() -> Store:
    """Lazy-init singleton store."""
    global _store  # noqa: PLW0603
    if _store is None:
        _store = _build_store()
    return _store


def reset_store() -> None:
    """Drop the singleton store (for testing)."""
    global _store  # noqa: PLW0603
    _store = None


def error_response(
    status: int, code: str, message: str, *, retryable: bool = False
) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(error=code, message=message, retryable=retryable).model_dump(),
    )
