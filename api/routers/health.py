"""Health check endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.database import ImporterDep

router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(importer: ImporterDep) -> JSONResponse:
    """Report healthy only when the database answers."""
    try:
        healthy = await importer.store.ping()
    except Exception:
        logger.exception("Database health check failed")
        healthy = False

    if not healthy:
        return JSONResponse({"status": "unhealthy"}, status_code=503)
    return JSONResponse({"status": "healthy"})
