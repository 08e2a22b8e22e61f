"""
cipherquest/main.py
CipherQuest hackathon platform API

create_app() wires the collaborators (database session factory, notifier,
password hasher, settings) onto app.state once; routes reach them through
the dependencies in cipherquest.dependencies.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from cipherquest import __version__
from cipherquest.config.settings import Settings, load_settings
from cipherquest.database import build_engine, build_sessionmaker, init_db, close_db, seed_reference_data
from cipherquest.errors import ErrorCode, APIError, get_error_summary, internal_error_from
from cipherquest.routes import auth, quest, teams, submissions, leaderboard
from cipherquest.services.auth_service import PasswordHasher
from cipherquest.services.notifier import Notifier, build_notifier

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:3001",
]


def create_app(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
    hasher: Optional[PasswordHasher] = None,
) -> FastAPI:
    settings = settings or load_settings()

    config_errors = settings.validate()
    if config_errors:
        for error in config_errors:
            logger.error(f"Configuration error: {error}")
        raise EnvironmentError(f"Invalid configuration: {'; '.join(config_errors)}")

    engine = build_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting CipherQuest API...")
        try:
            await init_db(engine)
            if settings.seed_demo_data:
                async with app.state.sessionmaker() as session:
                    await seed_reference_data(session)
        except Exception as e:
            logger.error(f"Failed to initialize database: {str(e)}")
            raise

        yield

        logger.info("Shutting down CipherQuest API...")
        try:
            await close_db(engine)
        except Exception as e:
            logger.error(f"Error closing database connection: {str(e)}")

    app = FastAPI(
        title="CipherQuest API",
        description="Hackathon platform: registration, cipher quest gate, submissions and judging",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    app.state.notifier = notifier or build_notifier(settings)
    app.state.hasher = hasher or PasswordHasher(settings.password_hash_scheme)

    # The limiter is shared by every app in the process; the last create_app() wins
    auth.limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = auth.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=DEFAULT_ORIGINS + settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "environment": settings.environment,
            "notifier": type(app.state.notifier).__name__,
            "version": __version__,
        }

    @app.get("/api/errors/health", tags=["Health"])
    async def error_handling_health():
        return get_error_summary()

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "message": "CipherQuest API",
            "version": __version__,
            "docs": "/docs" if settings.is_development else None,
        }

    app.include_router(auth.router, prefix="/api")
    app.include_router(teams.router, prefix="/api")
    app.include_router(quest.router, prefix="/api")
    app.include_router(submissions.router, prefix="/api")
    app.include_router(leaderboard.router, prefix="/api")

    return app


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

        error_details = [
            {"loc": error.get("loc"), "msg": error.get("msg"), "type": error.get("type")}
            for error in exc.errors()
        ]

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "success": False,
                "error": "Validation Error",
                "message": "Request validation failed",
                "code": ErrorCode.VALIDATION_ERROR,
                "details": {"errors": error_details}
            }
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"HTTP exception on {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": "Error",
                "message": str(exc.detail),
                "code": ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.INVALID_INPUT
            }
        )

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.warning(f"API error on {request.url.path}: {exc.code} - {exc.message}")
        return exc.to_response()

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        return internal_error_from(exc, f"{request.method} {request.url.path}").to_response()


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    reload = app.state.settings.is_development

    logger.info(f"Starting server on {host}:{port}")
    logger.info(f"Environment: {app.state.settings.environment}")

    uvicorn.run(
        "cipherquest.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )
