"""
FastAPI application for the Prep Academy LMS backend.

Run with ``uvicorn app.main:app`` from the ``backend`` directory.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import DatabaseManager, SessionLocal, init_db
from app.core.exceptions import GamificationError
from app.routers import api_router


logger = logging.getLogger(__name__)


def configure_logging(level: str = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests create and drop their own schema
    if not settings.TESTING:
        DatabaseManager.create_all_tables()
        db = SessionLocal()
        try:
            init_db(db)
        finally:
            db.close()
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")
    yield


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(GamificationError, _gamification_error_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


async def _gamification_error_handler(request: Request, exc: GamificationError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    content = {"error": exc.title, "detail": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "detail": "An unexpected error occurred"},
    )


app = create_app()
