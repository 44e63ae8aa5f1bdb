"""
KidLedger FastAPI application.
Main entry point for the backend API.
"""
import sqlite3
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api.v1.router import router as api_v1_router
from backend.app.config import get_settings, set_test_mode, is_test_mode
from backend.app.logging_config import configure_logging, get_logger
from backend.app.services.errors import (
    InsufficientFundsError,
    NotFoundError,
    StorageFailure,
    ValidationError,
    )

# Check for --test flag in command line arguments
# This must be done before any imports that might use settings
if "--test" in sys.argv:
    set_test_mode(True)
    print("[KidLedger] 🧪 Test mode enabled (--test flag detected)")
    sys.argv.remove("--test")

settings = get_settings()

configure_logging(settings.LOG_LEVEL, enable_file_logging=settings.LOG_TO_FILE)
logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


def _sqlite_path(db_url: str) -> Path:
    db_path = Path(db_url.replace("sqlite:///", ""))
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path
    return db_path


def _needs_migration(db_path: Path) -> bool:
    if not db_path.exists():
        logger.warning("Database file not found, running migrations", db_path=str(db_path))
        return True
    if db_path.stat().st_size == 0:
        logger.warning("Database file is empty (0 bytes), running migrations", db_path=str(db_path))
        return True

    try:
        conn = sqlite3.connect(str(db_path))
        try:
            cursor = conn.execute(
                "SELECT count(*) FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
                )
            table_count = cursor.fetchone()[0]
        finally:
            conn.close()
    except sqlite3.DatabaseError as e:
        logger.warning(f"Database appears corrupted, running migrations: {e}", db_path=str(db_path))
        return True

    if table_count == 0:
        logger.warning("Database has no tables, running migrations", db_path=str(db_path))
        return True

    logger.info(f"Database initialized with {table_count} tables", db_path=str(db_path))
    return False


def ensure_database_exists():
    """
    Ensure the SQLite database exists and is migrated.
    If the file is missing, empty or has no tables, run Alembic migrations.

    Only relevant when STORAGE_BACKEND is "database".
    """
    settings = get_settings()
    db_url = settings.DATABASE_URL
    if not db_url.startswith("sqlite:///"):
        return

    db_path = _sqlite_path(db_url)
    if not _needs_migration(db_path):
        return

    db_path.parent.mkdir(parents=True, exist_ok=True)
    alembic_ini = PROJECT_ROOT / "backend" / "alembic.ini"

    logger.info("Running Alembic migrations...")
    try:
        result = subprocess.run(
            [sys.executable, "-m", "alembic", "-c", str(alembic_ini), "upgrade", "head"],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            )
    except OSError as e:
        logger.error("Error creating database", error=str(e))
        sys.exit(1)

    if result.returncode == 0:
        logger.info("Database created and migrated successfully")
    else:
        logger.error("Failed to create database", stderr=result.stderr)
        sys.exit(1)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def register_exception_handlers(app: FastAPI) -> None:
    """Map ledger errors and request validation failures to HTTP responses."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logger.info("Not found", path=request.url.path, code=exc.code)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": str(exc), "code": exc.code},
            )

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(request: Request, exc: InsufficientFundsError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={**exc.to_payload(), "code": exc.code},
            )

    @app.exception_handler(ValidationError)
    async def ledger_validation_handler(request: Request, exc: ValidationError):
        logger.info("Rejected input", path=request.url.path, code=exc.code, field=exc.field)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Validation error", "code": exc.code, "errors": [exc.to_detail()]},
            )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Malformed request", path=request.url.path, error_count=len(exc.errors()))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Validation error", "errors": jsonable_encoder(exc.errors())},
            )

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure):
        logger.error("Storage failure", path=request.url.path, operation=exc.operation, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Storage failure", "code": exc.code},
            )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan context manager.
    Handles startup and shutdown events.
    """
    logger.info(
        "Starting KidLedger",
        version=settings.VERSION,
        storage_backend=settings.STORAGE_BACKEND,
        database_url=settings.DATABASE_URL.split("///")[-1],
        serialize_postings=settings.LEDGER_SERIALIZE_POSTINGS,
        test_mode=is_test_mode(),
        )

    if settings.STORAGE_BACKEND == "database":
        ensure_database_exists()

    yield
    logger.info("Shutting down KidLedger")


def create_app() -> FastAPI:
    """Build the FastAPI application with routers, CORS and error handlers."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        lifespan=lifespan,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    async def root():
        """Basic API information."""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": f"{settings.API_V1_PREFIX}/docs",
            }

    return app


app = create_app()
