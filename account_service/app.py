# account_service/app.py
import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .database import build_engine, build_session_factory, create_tables
from .errors import AccountError, UpstreamError
from .mailer import Mailer, build_mailer
from .models import utcnow
from .otp import OtpService
from .routes import auth_router
from .security import TokenIssuer

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    engine: Optional[Engine] = None,
    mailer: Optional[Mailer] = None,
    clock=utcnow,
) -> FastAPI:
    """Build the API with every collaborator passed in explicitly.

    ``engine`` and ``mailer`` default to ones derived from ``settings``;
    tests hand in an in-memory database and a fake mailer.
    """
    if engine is None:
        engine = build_engine(settings.database_url)
    session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        create_tables(engine)
        logger.info("🚀 Account service ready in %s mode", settings.environment)
        yield

    app = FastAPI(title="Free Ecosystem API", lifespan=lifespan)

    app.state.session_factory = session_factory
    app.state.mailer = mailer or build_mailer(settings)
    app.state.otp = OtpService(
        expire_minutes=settings.otp_expire_minutes,
        length=settings.otp_length,
        clock=clock,
    )
    app.state.tokens = TokenIssuer(
        settings.auth_secret_key,
        expire_minutes=settings.access_token_expire_minutes,
        clock=clock,
    )

    # CORS setup
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app, settings)
    app.include_router(auth_router)

    @app.get("/")
    def root():
        return {
            "message": "Welcome to Free Ecosystem API",
            "status": "Healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "message": "FastAPI backend is running"}

    return app


def register_error_handlers(app: FastAPI, settings: Settings):
    @app.exception_handler(AccountError)
    async def account_error_handler(request: Request, exc: AccountError):
        body = {"success": False, "message": exc.message}
        if exc.user_id is not None:
            body["userId"] = exc.user_id
        if isinstance(exc, UpstreamError):
            logger.error("❌ %s %s: %s", request.method, request.url.path, exc.error)
            if exc.error and not settings.is_production:
                body["error"] = exc.error
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in e["loc"][1:]), "message": e["msg"]}
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request", "error": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = "Route Not Found"
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("❌ Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Something went wrong!",
                "error": {}
                if settings.is_production
                else "".join(traceback.format_exception(exc)),
            },
        )
