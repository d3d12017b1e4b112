"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hr_backend.core.config import Settings, get_settings
from hr_backend.core.middleware import setup_middleware
from hr_backend.core.rate_limiter import create_limiter
from hr_backend.core.exceptions import HRPlatformError
from hr_backend.core.security import TokenService
from hr_backend.db.base import Base
from hr_backend.db.session import create_db_engine, create_session_factory
from hr_backend.db.seeds.seed_admin import seed_default_admin
from hr_backend.db.seeds.seed_settings import seed_default_settings
from hr_backend.services.email_service import EmailService
from hr_backend.services.file_service import FileStorage
import hr_backend.models  # noqa: F401  registers every table on Base.metadata

from hr_backend.api.admin_users import router as admin_users_router
from hr_backend.api.employees import router as employees_router
from hr_backend.api.documents import router as documents_router, search_router as document_search_router
from hr_backend.api.annotations import router as annotations_router, search_router as annotation_search_router
from hr_backend.api.settings import router as settings_router

logger = logging.getLogger("hr_platform")

GENERIC_ERROR_MESSAGE = "Erro interno do servidor."


def _error_body(status_code: int, message: str, errors=None) -> dict:
    body = {"status": "fail" if status_code < 500 else "error", "message": message}
    if errors:
        body["errors"] = errors
    return body


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting %s", app.state.settings.APP_NAME)
    Base.metadata.create_all(bind=app.state.engine)

    db = app.state.session_factory()
    try:
        seed_default_admin(db, app.state.settings)
        seed_default_settings(db, app.state.settings)
    finally:
        db.close()

    try:
        app.state.storage.ensure_bucket()
        logger.info("Document bucket ready")
    except Exception as e:
        logger.warning("Document storage not available: %s", e)

    yield

    app.state.engine.dispose()
    logger.info("Shutting down %s", app.state.settings.APP_NAME)


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to the ``{status, message, errors?}`` body."""

    @app.exception_handler(HRPlatformError)
    async def hr_exception_handler(request: Request, exc: HRPlatformError):
        headers = None
        if exc.status_code == 401:
            headers = {"WWW-Authenticate": "Bearer"}
        message = exc.message
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
            if not app.state.settings.DEBUG:
                message = GENERIC_ERROR_MESSAGE
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, message, getattr(exc, "errors", None)),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            errors.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
        return JSONResponse(status_code=400, content=_error_body(400, "Erro de validação.", errors))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = str(exc) if app.state.settings.DEBUG else GENERIC_ERROR_MESSAGE
        return JSONResponse(status_code=500, content=_error_body(500, message))


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[FileStorage] = None,
    mailer: Optional[EmailService] = None,
) -> FastAPI:
    """Build the application and its per-process components."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Role-based HR record management with field-level change history",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    engine = create_db_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.token_service = TokenService(settings)
    app.state.storage = storage or FileStorage(settings)
    app.state.mailer = mailer or EmailService(settings)

    # Middleware
    setup_middleware(app, settings)

    # Rate limiting
    app.state.limiter = create_limiter(settings)

    register_exception_handlers(app)

    # Register routers
    app.include_router(admin_users_router, prefix="/api")
    app.include_router(employees_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")
    app.include_router(document_search_router, prefix="/api")
    app.include_router(annotations_router, prefix="/api")
    app.include_router(annotation_search_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": "0.1.0",
            "docs": "/docs",
        }

    @app.get("/api/health")
    async def health():
        """Quick health check endpoint."""
        return {"status": "ok"}

    return app


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


configure_logging(get_settings())
app = create_app()
