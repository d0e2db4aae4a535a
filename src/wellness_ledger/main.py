"""
FastAPI application for the Wellness Minutes Ledger
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import config
from .db.engine import init_db
from .exceptions import (
    LedgerError,
    ledger_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler,
)
from .logging_config import RequestIDMiddleware, setup_logging
from .session_routes import router as session_router
from .ledger_routes import router as ledger_router
from .earnings_routes import router as earnings_router
from .payout_routes import router as payout_router, specialist_router as specialist_payout_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Production schemas are managed by Alembic
    if config.is_dev:
        try:
            init_db()
        except Exception as e:
            logger.error(f"Database initialization failed: {e}", exc_info=True)
            raise
    logger.info(f"Wellness ledger API started (env={config.ENV}, build={config.BUILD_VERSION})")
    yield


def create_app() -> FastAPI:
    """Build the API application with logging, error handlers and routers"""
    setup_logging(env=config.ENV, log_level=config.LOG_LEVEL, build=config.BUILD_VERSION)

    app = FastAPI(title="Wellness Minutes Ledger API", version=__version__, lifespan=lifespan)

    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(LedgerError, ledger_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(session_router)
    app.include_router(ledger_router)
    app.include_router(earnings_router)
    app.include_router(specialist_payout_router)
    app.include_router(payout_router)

    @app.get("/health")
    async def health():
        """Health check endpoint for monitoring"""
        return {"status": "healthy", "service": "wellness-ledger", "version": config.BUILD_VERSION}

    return app


app = create_app()
