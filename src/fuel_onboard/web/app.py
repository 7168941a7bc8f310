"""FastAPI application exposing the onboarding rules and profiles."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..db.engine import get_db_path, init_db, seed_legal_documents
from ..errors import OnboardingValidationError, ProfileNotFound
from .routers import onboarding

logger = logging.getLogger(__name__)


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    db_path = db_path or get_db_path()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - runs on startup and shutdown."""
        await init_db(db_path)
        seeded = await seed_legal_documents(db_path)
        if seeded:
            logger.info("Seeded %d legal documents", seeded)
        yield

    app = FastAPI(
        title="fuel-onboard",
        description="Onboarding engine for a nutrition and weight tracker",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.db_path = db_path

    app.include_router(onboarding.router)

    @app.exception_handler(OnboardingValidationError)
    async def validation_error(request: Request, exc: OnboardingValidationError):
        return JSONResponse(
            status_code=422,
            content={"ok": False, "i18n_key": exc.i18n_key, "i18n_params": exc.i18n_params},
        )

    @app.exception_handler(ProfileNotFound)
    async def profile_not_found(request: Request, exc: ProfileNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": "0.1.0"}

    return app
