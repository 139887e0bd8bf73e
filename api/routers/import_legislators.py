"""Trigger endpoint for the legislator import."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response

from api.database import ImporterDep
from scripts.legislator_importer import SessionRange
from scripts.legislator_importer.schema import DEFAULT_END_CONGRESS, DEFAULT_START_CONGRESS

router = APIRouter(tags=["import"])

logger = logging.getLogger(__name__)

CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
CORS_ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOWED_HEADERS),
    "Access-Control-Allow-Methods": ", ".join(CORS_ALLOWED_METHODS),
}


@router.options("/import-legislators")
async def import_legislators_preflight() -> Response:
    """Answer CORS pre-flight with an empty body."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.api_route("/import-legislators", methods=["GET", "POST"])
async def import_legislators(
    importer: ImporterDep,
    start_congress: Annotated[str, Query(alias="startCongress")] = str(DEFAULT_START_CONGRESS),
    end_congress: Annotated[str, Query(alias="endCongress")] = str(DEFAULT_END_CONGRESS),
) -> JSONResponse:
    """
    Run one import for the requested Congress range.

    Locked, successful and recovered-error runs all return 200 with the
    result body. Anything that escapes the run returns 500 with diagnostics.
    """
    logger.info(f"Import requested for Congresses {start_congress} down to {end_congress}")
    try:
        # Empty parameters fall back to the defaults
        session_range = SessionRange(
            int(start_congress or DEFAULT_START_CONGRESS),
            int(end_congress or DEFAULT_END_CONGRESS),
        )
        result = await importer.run(session_range)
    except Exception as e:
        logger.exception(f"Error in import-legislators endpoint: {e}")
        return JSONResponse(
            {
                "status": "error",
                "message": str(e),
                "type": type(e).__name__,
                "timestamp": datetime.now(UTC).isoformat(),
            },
            status_code=500,
            headers=CORS_HEADERS,
        )

    logger.info(f"Import completed with result: {result.to_dict()}")
    return JSONResponse(result.to_dict(), headers=CORS_HEADERS)
