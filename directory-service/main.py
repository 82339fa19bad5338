import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.client import ApiClient
from app.config import Settings, get_settings
from app.database import create_engine, create_session_maker
from app.hooks import DirectoryHooks
from app.logging_config import configure_logging
from app.models import Base
from app.query_cache import QueryCache
from app.routes import router
from app.views import router as views_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    # Engine, API client and cache live for the whole process
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        engine = create_engine(settings.database_url, echo=settings.database_echo)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        app.state.engine = engine
        app.state.session_maker = create_session_maker(engine)

        if settings.api_url:
            client = ApiClient(settings.api_url)
        else:
            client = ApiClient("http://directory-service", transport=httpx.ASGITransport(app=app))
        app.state.hooks = DirectoryHooks(client, QueryCache(stale_time=settings.stale_time_seconds))
        logger.info("User directory service started")
        try:
            yield
        finally:
            await client.aclose()
            await engine.dispose()
            logger.info("User directory service stopped")

    app = FastAPI(title="User Directory Service API", lifespan=lifespan)

    # Mount static files
    static_path = os.path.join(os.path.dirname(__file__), "app", "static")
    if os.path.exists(static_path):
        app.mount("/static", StaticFiles(directory=static_path), name="static")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        fields = ", ".join(str(err["loc"][-1]) for err in exc.errors())
        return JSONResponse({"error": f"Invalid request parameters: {fields}"}, status_code=400)

    # Include routes
    app.include_router(router)
    app.include_router(views_router)
    return app


app = create_app()
