"""
User-account service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI

from api.codec import register_exception_handlers
from api.middleware import register_middleware
from api.routes import router as health_router
from auth.directory import UserDirectory
from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.routes import router as user_router
from auth.service import AuthService
from config.settings import Settings, config
from database.directory import SqlUserDirectory
from database.session import build_engine, build_session_factory, init_db

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    directory: Optional[UserDirectory] = None,
) -> FastAPI:
    """
    Build the app.  When no ``directory`` is injected, a SQL directory is
    wired from ``settings.database_url`` and the store is checked at
    startup; an unreachable store or a missing ``JWT_SECRET`` stops the
    process.
    """
    settings = settings or config

    app = FastAPI(
        title="User Accounts",
        version="1.0.0",
        description="Register, log in, and read your own profile.",
    )

    tokens = TokenService(settings.jwt_secret, expiry_seconds=settings.jwt_expiry_seconds)
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    if directory is None:
        engine = build_engine(settings.database_url, echo=settings.debug)
        directory = SqlUserDirectory(build_session_factory(engine))

        @app.on_event("startup")
        async def on_startup():
            logger.info("Connecting to database…")
            await init_db(engine)

        @app.on_event("shutdown")
        async def on_shutdown():
            await engine.dispose()

    app.state.token_service = tokens
    app.state.auth_service = AuthService(directory=directory, hasher=hasher, tokens=tokens)

    register_middleware(app, settings.cors_origins)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(user_router, prefix="/user")

    return app


if __name__ == "__main__":
    configure_logging(config.debug)
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
