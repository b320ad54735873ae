"""
Application entry point.
Run with:  uvicorn authserver.main:app --reload

⚠️  DEVELOPMENT NOTE:
    A default admin user is seeded on startup while SEED_ADMIN is true
    (see authserver/db/seeder.py). Disable it before deploying to production.
"""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authserver.core.logging_config import configure_logging
from authserver.core.config import settings
from authserver.core.exceptions import register_exception_handlers
from authserver.api.router import api_router
from authserver.db.database import init_db
from authserver.db.seeder import seed_admin
from authserver.security.authenticator import RequestAuthenticator
from authserver.security.middleware import install_auth_middleware
from authserver.security.token_manager import TokenManager
from authserver.security.token_store import TokenStore, build_token_store
from authserver.security.user_details import load_principal_by_id

configure_logging()


def create_app(token_store: Optional[TokenStore] = None) -> FastAPI:
    """Create and configure the FastAPI application instance."""
    logger = logging.getLogger(__name__)
    logger.info("Starting FastAPI application setup")
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Login and bearer token authentication backed by a refresh token store.",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    token_manager = TokenManager.from_settings(
        settings, token_store or build_token_store(settings)
    )
    app.state.token_manager = token_manager

    # ── Middleware ──────────────────────────────────────────────────────────
    install_auth_middleware(
        app, RequestAuthenticator(token_manager, load_principal_by_id)
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Authorization"],
    )

    # ── Routers / error handlers ────────────────────────────────────────────
    app.include_router(api_router)
    register_exception_handlers(app)

    # ── Startup / shutdown events ───────────────────────────────────────────
    @app.on_event("startup")
    def on_startup() -> None:
        """Initialize the database and development seed data."""
        logger.info("Initializing database and seed data")
        init_db()
        if settings.SEED_ADMIN:
            seed_admin()

    return app


app = create_app()
