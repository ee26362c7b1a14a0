"""FastAPI application factory."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlmodel import SQLModel

from moviesync.db.engine import get_engine
from moviesync.api.routes import movies, wordpress


def create_app() -> FastAPI:
    """Build and return the FastAPI app."""

    engine = get_engine()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        SQLModel.metadata.create_all(engine)
        yield

    app = FastAPI(
        title="Movie Sync API",
        description="Movie catalog sync with WordPress Pods and OMDb enrichment",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(wordpress.router, prefix="/wordpress", tags=["wordpress"])
    app.include_router(movies.router, prefix="/movies", tags=["movies"])

    return app


# Module-level app instance for uvicorn
app = create_app()
