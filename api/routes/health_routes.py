"""Health check endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.database import check_db_connection, get_pool_status
from core.ratelimit import limiter
from schemas import DetailedHealthResponse, HealthResponse, PoolStatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

SERVICE_NAME = "certificate-generator"


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", service=SERVICE_NAME)


@router.get("/health/detailed", response_model=DetailedHealthResponse)
@limiter.limit("30/minute")
async def health_detailed(request: Request) -> DetailedHealthResponse:
    """Detailed health check with component status.

    Always returns 200 - check individual component statuses for health.
    """
    engine = request.app.state.engine
    try:
        await check_db_connection(engine)
        database_ok = True
    except Exception:
        logger.warning("health.database.unreachable", exc_info=True)
        database_ok = False

    pool = get_pool_status(engine)
    pool_status = (
        PoolStatusResponse(
            pool_size=pool.pool_size,
            checked_out=pool.checked_out,
            overflow=pool.overflow,
            checked_in=pool.checked_in,
        )
        if pool is not None
        else None
    )

    return DetailedHealthResponse(
        status="healthy" if database_ok else "unhealthy",
        service=SERVICE_NAME,
        database=database_ok,
        pool=pool_status,
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={
        503: {
            "description": "Service unavailable - init failed or DB unreachable",
            "content": {
                "application/json": {"example": {"detail": "Database unavailable"}}
            },
        }
    },
)
@limiter.limit("30/minute")
async def ready(request: Request) -> HealthResponse:
    """Readiness endpoint.

    Returns 200 only when:
    - Startup (schema migrations) has completed successfully
    - The database is reachable
    """
    init_error = getattr(request.app.state, "init_error", None)
    if init_error:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Initialization failed: {init_error}",
        )

    if not getattr(request.app.state, "init_done", False):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Starting",
        )

    try:
        await check_db_connection(request.app.state.engine)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e

    return HealthResponse(status="ready", service=SERVICE_NAME)
