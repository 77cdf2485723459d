"""FastAPI application factory.

The api layer validates inputs, calls the journal and aggregation
modules, and returns payloads for the UI. It holds no trading logic.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Generator

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from kore.db.repo import DbSession
from kore.db.session import get_session, init_db, resolve_db_path

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def get_db_session(request: Request) -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session = get_session(getattr(request.app.state, "db_path", None))
    try:
        yield session
    finally:
        session.close()


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Dependency resolving the caller from the X-User-Id header.

    Raises:
        HTTPException: 401 if the header is missing or blank.
    """
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


def cors_origins() -> list[str]:
    """Allowed origins from KORE_CORS_ORIGINS (comma-separated)."""
    raw = os.environ.get("KORE_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        db_path: Optional path to database file. Overrides KORE_DB_PATH.

    Returns:
        Configured FastAPI application.
    """
    resolved_path = resolve_db_path(db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_db(resolved_path)
        logger.info(f"Database ready at {resolved_path}")
        yield

    app = FastAPI(
        title="Kore API",
        description="Trading journal with performance analytics",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.db_path = resolved_path

    # Add CORS middleware for UI access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routes
    from kore.api.routes import assets, goals, notes, portfolios, stats, trades

    app.include_router(trades.router, prefix="/api")
    app.include_router(stats.router, prefix="/api")
    app.include_router(portfolios.router, prefix="/api")
    app.include_router(goals.router, prefix="/api")
    app.include_router(notes.router, prefix="/api")
    app.include_router(assets.router, prefix="/api")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Default app instance
app = create_app()
