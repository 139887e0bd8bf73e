"""FastAPI application entry point."""

from fastapi import FastAPI

from api.database import importer_lifespan
from api.routers import health, import_legislators
from scripts.legislator_importer import ImporterSettings


def create_app(settings: ImporterSettings | None = None) -> FastAPI:
    """
    Create the application; settings default to the environment at startup.

    CORS headers are attached by the import router itself, including on its
    OPTIONS pre-flight route, so browsers see the same header list on every
    response.
    """
    app = FastAPI(
        title="Legislator Importer",
        description="Imports Congress.gov member records into PostgreSQL on demand",
        version="0.1.0",
        lifespan=importer_lifespan(settings),
    )

    app.include_router(health.router)
    app.include_router(import_legislators.router)
    return app


app = create_app()
