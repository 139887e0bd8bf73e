"""Importer lifecycle and dependency for FastAPI."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from scripts.legislator_importer import (
    ImporterSettings,
    LegislatorImporter,
    configure_logging,
    load_settings,
    open_importer,
)


def importer_lifespan(settings: ImporterSettings | None = None):
    """
    Build a lifespan that opens the connection pool and HTTP client once per process.

    Settings are loaded from the environment at startup when not given, so a
    missing key fails the server before it accepts requests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        resolved = settings or load_settings()
        async with open_importer(resolved) as importer:
            app.state.importer = importer
            yield

    return lifespan


def get_importer(request: Request) -> LegislatorImporter:
    """Return the process-wide importer."""
    return request.app.state.importer


ImporterDep = Annotated[LegislatorImporter, Depends(get_importer)]
