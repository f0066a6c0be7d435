# expense_tracker/main.py

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from expense_tracker.api.v1.api import api_router
from expense_tracker.core.config import settings
from expense_tracker.core.errors import register_exception_handlers
from expense_tracker.core.logging import configure_logging
from expense_tracker.db.init_db import init_db

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings)
    logger.info("starting", project=settings.PROJECT_NAME, version=settings.VERSION)

    # ---------- MIGRATIONS ----------
    if settings.run_migrations_on_startup:
        init_db()

    yield

    logger.info("shutting_down")


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # ---------- CORS ----------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.backend_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- ERRORS ----------
    register_exception_handlers(app)

    # ---------- ROUTERS ----------
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/healthz", tags=["system"])
    def healthz():
        return {"status": "ok"}

    return app


# Run with: uvicorn expense_tracker.main:app --reload
app = create_application()
