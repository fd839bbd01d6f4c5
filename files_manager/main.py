import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load environment variables as early as possible
load_dotenv()

from .application.ports.blob_store import BlobStore
from .application.ports.job_queue import JobQueue
from .application.ports.session_store import SessionStore
from .config import Settings, get_settings
from .database import build_engine, create_db_and_tables
from .exceptions import http_exception_handler, validation_exception_handler
from .infrastructure.cache.memory_session_store import InMemorySessionStore
from .infrastructure.cache.redis_session_store import RedisSessionStore
from .infrastructure.queue.redis_job_queue import RedisJobQueue
from .infrastructure.queue.threaded_job_queue import ThreadedJobQueue
from .infrastructure.storage.local_blob_store import LocalBlobStore
from .jobs import make_thumbnail_handler
from .middleware import SecurityMiddleware, LoggingMiddleware, ErrorHandlingMiddleware
from .routers import app_router, users_router, files_router

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )


def build_session_store(settings: Settings) -> SessionStore:
    if settings.SESSION_BACKEND == "memory":
        return InMemorySessionStore()
    return RedisSessionStore(settings.REDIS_URL)


def build_job_queue(settings: Settings, engine: Engine, blob_store: BlobStore) -> JobQueue:
    if settings.JOB_QUEUE_BACKEND == "redis":
        # Consumed by the standalone worker process
        return RedisJobQueue(settings.REDIS_URL, name=settings.JOB_QUEUE_NAME)
    return ThreadedJobQueue(
        make_thumbnail_handler(engine, blob_store, settings.THUMBNAIL_WIDTHS),
        max_workers=settings.THUMBNAIL_WORKERS,
        maxsize=settings.JOB_QUEUE_MAXSIZE,
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    session_store: Optional[SessionStore] = None,
    blob_store: Optional[BlobStore] = None,
    job_queue: Optional[JobQueue] = None,
) -> FastAPI:
    """Build the API. Any store passed in is used as-is instead of being built from settings."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Starting {settings.APP_NAME}...")
        state = app.state
        state.settings = settings
        state.engine = engine if engine is not None else build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        create_db_and_tables(state.engine)
        state.session_store = session_store if session_store is not None else build_session_store(settings)
        state.blob_store = blob_store if blob_store is not None else LocalBlobStore(settings.FOLDER_PATH)
        state.job_queue = job_queue if job_queue is not None else build_job_queue(settings, state.engine, state.blob_store)
        if hasattr(state.job_queue, "start"):
            state.job_queue.start()
        logger.info("Stores initialized successfully")
        yield
        # Shutdown
        logger.info(f"Shutting down {settings.APP_NAME}...")
        if hasattr(state.job_queue, "close"):
            state.job_queue.close()
        state.session_store.close()
        if engine is None:
            state.engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None),
    )

    # Add custom exception handlers
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Add middleware
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(app_router.router)
    app.include_router(users_router.router)
    app.include_router(files_router.router)
    return app


configure_logging(get_settings())
app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("files_manager.main:app", host=_settings.HOST, port=_settings.PORT)
