import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import Settings, get_settings
from app.core.database import Database
from app.core.exceptions import register_exception_handlers
from app.core.logger import setup_logging
from app.core.storage import LocalFileStorage
from app.routers import assets, categories


logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    The database and the file storage are constructed here, once, and handed
    to the request handlers through ``app.state`` and FastAPI dependencies.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    database = database or Database(settings)
    file_storage = LocalFileStorage(settings.upload_path, settings.MAX_UPLOAD_SIZE)
    file_storage.ensure_root()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s %s (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)
        if settings.AUTO_CREATE_TABLES and database.available:
            try:
                database.create_all()
            except Exception:
                # 不阻止启动，由 /health 和各接口的 503 反映
                logger.exception("Database initialization failed")
        yield
        database.dispose()
        logger.info("Shutting down %s", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        description="媒体资产管理 API",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.database = database
    app.state.file_storage = file_storage

    register_exception_handlers(app)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        if request.method != "OPTIONS":
            logger.info(
                "%s %s -> %s (%.3fs)",
                request.method, request.url.path, response.status_code, process_time,
            )
        return response

    # 上传文件只读访问
    app.mount("/uploads", StaticFiles(directory=str(file_storage.root)), name="uploads")

    app.include_router(assets.router, prefix=settings.API_PREFIX)
    app.include_router(categories.router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root():
        return {"message": f"Welcome to {settings.APP_NAME}", "docs": "/docs"}

    @app.get("/health")
    def health_check():
        db_ok = database.ping()
        return {
            "status": "healthy" if db_ok else "degraded",
            "database": "ok" if db_ok else "unavailable",
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()
