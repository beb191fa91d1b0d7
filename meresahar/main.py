# File: meresahar/main.py
# Project: meresahar

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from meresahar.core.config import cors_origins_list, settings
from meresahar.core.ratelimit import limiter
from meresahar.db.base import Base
from meresahar.db.session import build_engine, make_session_factory
from meresahar.db.store import IssueStore, StoreUnavailable
from meresahar.routers import admin, auth, issues, issues_stats, map as map_router
import meresahar.models  # noqa: F401  registers tables on Base.metadata


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine: Engine = app.state.engine
    try:
        if settings.auto_create_tables:
            Base.metadata.create_all(engine)
        app.state.store.ping()
    except (SQLAlchemyError, StoreUnavailable) as e:
        # never serve traffic without a working database
        logging.critical(f"Database unavailable at startup: {e}", exc_info=True)
        raise
    logging.info("Connected to database.")
    yield
    if app.state.owns_engine:
        engine.dispose()


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="MereSahar Issues API", lifespan=lifespan)
    app.state.owns_engine = engine is None
    app.state.engine = engine or build_engine(settings.database_url)
    app.state.session_factory = make_session_factory(app.state.engine)
    app.state.store = IssueStore(app.state.engine)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins_list(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(auth.router)
    app.include_router(issues_stats.router)
    app.include_router(issues.router)
    app.include_router(admin.router)
    app.include_router(map_router.router)
    return app


app = create_app()
