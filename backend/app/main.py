import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.deps import error_response
from app.api.routes import health, planning, projects
from app.config import settings
from app.logging import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(
        "api_starting",
        environment=settings.environment,
        use_database=settings.use_database,
    )
    yield
    logger.info("api_stopping")


app = FastAPI(
    title="Office Space Planner API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url=None,
    lifespan=lifespan,
)


def _with_request_id(request: Request, response: JSONResponse) -> JSONResponse:
    # Exception handlers run outside the middleware, so echo the ID here too
    response.headers["X-Request-ID"] = getattr(
        request.state, "request_id", request.headers.get("X-Request-ID", "")
    )
    return response


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Bind a per-request ID into structlog context and echo it back as X-Request-ID."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Pydantic 422s use the ErrorResponse shape instead of FastAPI's {"detail": [...]}."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    logger.info("request_validation_failed", path=request.url.path, problems=problems)
    return _with_request_id(request, error_response(422, "validation_error", problems))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Storage and database failures end up here as a retryable 500."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return _with_request_id(
        request,
        error_response(500, "internal_error", "An unexpected error occurred", retryable=True),
    )


app.include_router(health.router)
app.include_router(projects.router, prefix="/api/v1")
app.include_router(planning.router, prefix="/api/v1")
