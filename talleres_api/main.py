from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from talleres_api import __version__
from talleres_api.api.v1.router import api_router
from talleres_api.core.config import Settings, settings as default_settings
from talleres_api.core.errors import AppError, QueryError
from talleres_api.core.logging import setup_logging
from talleres_api.db.bootstrap import run_migrations_and_seed
from talleres_api.db.session import Database, is_unique_violation

logger = logging.getLogger(__name__)


def _database_from(settings: Settings) -> Database:
    return Database(
        settings.DATABASE_URL,
        statement_timeout_ms=settings.DB_STATEMENT_TIMEOUT_MS,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        slow_query_ms=settings.SLOW_QUERY_MS,
    )


def _install_error_handlers(api: FastAPI) -> None:
    @api.exception_handler(AppError)
    def handle_app_error(request: Request, exc: AppError):
        if isinstance(exc, QueryError):
            logger.error("%s %s -> %s (db_code=%s)", request.method, request.url.path, exc.code, exc.db_code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @api.exception_handler(RequestValidationError)
    def handle_validation_error(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={
                "error": "Datos inválidos",
                "code": "VALIDATION_ERROR",
                "message": "La solicitud contiene campos faltantes o inválidos",
                "details": details,
            },
        )

    @api.exception_handler(StarletteHTTPException)
    def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "code": f"HTTP_{exc.status_code}", "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @api.exception_handler(IntegrityError)
    def handle_integrity_error(request: Request, exc: IntegrityError):
        logger.warning("Violación de integridad en %s %s: %s", request.method, request.url.path, exc.orig)
        if is_unique_violation(exc):
            return JSONResponse(
                status_code=409,
                content={"error": "Registro duplicado", "code": "UNIQUE_VIOLATION", "message": "Registro duplicado."},
            )
        # el resto (NOT NULL, llaves foráneas) es un dato inválido
        return JSONResponse(
            status_code=400,
            content={
                "error": "Datos inválidos",
                "code": "CONSTRAINT_VIOLATION",
                "message": "Los datos no cumplen las restricciones de la base de datos.",
            },
        )

    @api.exception_handler(Exception)
    def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Error no controlado en %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Error interno del servidor", "code": "INTERNAL_ERROR", "message": "Error interno."},
        )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "db", None) is None:
            app.state.db = _database_from(settings)
        run_migrations_and_seed(app.state.db, settings)
        logger.info("API lista (%s)", settings.ENVIRONMENT)
        yield
        app.state.db.dispose()

    api = FastAPI(
        title="Talleres API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        swagger_ui_parameters={"displayRequestDuration": True, "persistAuthorization": True},
        lifespan=lifespan,
    )
    api.state.db = database

    origins = settings.allowed_origins
    api.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # métricas /metrics (Prometheus)
    Instrumentator().instrument(api).expose(api, include_in_schema=False, should_gzip=True)

    _install_error_handlers(api)
    api.include_router(api_router, prefix="/api/v1")

    @api.get("/healthz", tags=["health"])
    def healthz(request: Request):
        db: Database = request.app.state.db
        db_ok = db.ping()
        body = {"status": "ok" if db_ok else "degraded", "database": db_ok, "pool": db.pool_stats()}
        return JSONResponse(status_code=200 if db_ok else 503, content=body)

    return api


api = create_app()
