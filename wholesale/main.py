"""
main.py — FastAPI application factory

Wires the database, middleware, exception handlers and every router. Tests
build their own app with ``create_app(Database("sqlite://"))``.

Business Rules:
- Every response carries X-Request-ID (8 chars) and X-API-Version
- Every error body has the ErrorResponse shape: error, status_code, request_id, detail
- Storage outages (OperationalError/InterfaceError) surface as 503
- Startup migrations run in the lifespan; skipped when TESTING is set

Called by: uvicorn (wholesale.main:app)
Depends on: config, database, logging_config, rate_limit, routers/*
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import InterfaceError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .config import settings
from .database import Database
from .http_client import close_clients
from .logging_config import setup_logging
from .rate_limit import limiter
from .routers import (
    auth,
    bulk_upload,
    cart,
    certifications,
    chat,
    faq,
    inquiries,
    membership,
    multi_payments,
    payments,
    pricing,
    products,
    profile,
    quotes,
    rfq,
    sharing,
    tariffs,
)
from .schemas.errors import ErrorResponse
from .services.errors import ServiceError
from .startup import run_startup_migrations

ROUTERS = (
    auth,
    products,
    certifications,
    pricing,
    rfq,
    inquiries,
    profile,
    quotes,
    payments,
    multi_payments,
    chat,
    bulk_upload,
    faq,
    sharing,
    tariffs,
    membership,
    cart,
)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _error(request: Request, status_code: int, error: str, detail=None) -> JSONResponse:
    body = ErrorResponse(
        error=error, status_code=status_code, request_id=_request_id(request), detail=detail
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(database: Database | None = None) -> FastAPI:
    setup_logging()
    database = database or Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        run_startup_migrations(app.state.database)
        logger.info("Wholesale API started (version={})", settings.app_version)
        yield
        await close_clients()
        app.state.database.dispose()
        logger.info("Wholesale API stopped")

    app = FastAPI(title="B2B Wholesale", version=settings.app_version, lifespan=lifespan)
    app.state.database = database
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SessionMiddleware, secret_key=settings.secret_key, https_only=False)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        with logger.contextualize(request_id=request_id):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-API-Version"] = settings.app_version
        return response

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error("{} {}: {}", request.method, request.url.path, exc.message)
        return _error(request, exc.status_code, exc.message, exc.details or None)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return _error(request, exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        detail = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
            for e in exc.errors()
        ]
        return _error(request, 422, "Validation error", detail)

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def storage_error_handler(request: Request, exc: Exception):
        logger.error("Database unavailable on {} {}: {}", request.method, request.url.path, exc)
        return _error(request, 503, "Service temporarily unavailable")

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": settings.app_version}

    for module in ROUTERS:
        app.include_router(module.router)

    return app


app = create_app()
