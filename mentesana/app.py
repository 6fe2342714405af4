"""
FastAPI application entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from mentesana.config import Settings, get_settings
from mentesana.db import Database, create_database
from mentesana.errors import ServiceError
from mentesana.routes import router
from mentesana.schema import init_schema

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None, db: Optional[Database] = None
) -> FastAPI:
    """
    Build the app. The database is connected and its schema ensured on
    startup; a ``db`` passed in by the caller is used as-is and left open on
    shutdown.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = db or create_database(settings)
        init_schema(database)
        app.state.db = database
        try:
            yield
        finally:
            app.state.db = None
            if db is None:
                database.close()
                logger.info("Closed %s connection", database.name)

    app = FastAPI(title="Mente Sana API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = None
    _register_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)

    if settings.static_dir and Path(settings.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    return app


def serve() -> None:
    settings = get_settings()
    uvicorn.run(
        "mentesana.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


app = create_app()
