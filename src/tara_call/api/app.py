"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import get_settings
from ..services.feedback_store import FeedbackStore
from .routers import connection, feedback

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Builds the feedback store once per process unless one was injected
    into `create_app()`, and closes it on shutdown if it was built here.
    """
    settings = get_settings()
    owns_store = app.state.feedback_store is None
    if owns_store:
        app.state.feedback_store = await FeedbackStore.create(
            settings.supabase_url,
            settings.supabase_key,
            table=settings.feedback_table,
        )
    logging.info("Tara call API starting up...")
    yield
    if owns_store:
        await app.state.feedback_store.close()
        app.state.feedback_store = None
    logging.info("Tara call API shutting down...")


def create_app(feedback_store: FeedbackStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Tara Call API",
        description="Connection details and post-call feedback for the Tara voice agent",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.feedback_store = feedback_store

    # Configure CORS for frontend access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(connection.router, prefix="/api", tags=["connection"])
    app.include_router(feedback.router, prefix="/api", tags=["feedback"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
