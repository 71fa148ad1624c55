from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.auth.google import GoogleTokenVerifier
from app.config.settings import Settings
from app.database.session import Database
from app.endpoints.router import api_router
from app.exceptions import (
    BaseAPIException,
    base_api_exception_handler,
    database_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.utils.db_utils import create_default_admin, ensure_schema
from app.utils.email_service import Mailer
from app.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Execute startup tasks.
    Verifies the schema and creates the default admin user if configured.
    """
    database: Database = app.state.database
    ensure_schema(database, app.state.settings)
    create_default_admin(database, app.state.settings)
    logger.info(f"{app.state.settings.PROJECT_NAME} started")
    try:
        yield
    finally:
        database.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(settings.DATABASE_URL)
    app.state.mailer = Mailer(settings)
    app.state.google_verifier = GoogleTokenVerifier(settings.GOOGLE_CLIENT_ID)

    app.add_exception_handler(BaseAPIException, base_api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API Router
    app.include_router(api_router)

    @app.get("/api/health")
    def health():
        """
        Health check endpoint.
        """
        return {"status": "ok", "message": f"{settings.PROJECT_NAME} is running"}

    return app


if __name__ == "__main__":
    import uvicorn
    port = Settings().PORT
    uvicorn.run("app.main:create_app", factory=True, host="0.0.0.0", port=port, reload=True)
