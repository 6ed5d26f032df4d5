"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.bank_account.api.games_router import router as games_router
from src.bank_account.api.router import router as banking_router
from src.bank_account.api.services_router import router as services_router
from src.bank_admin.api.router import router as admin_router
from src.bank_common.errors import AppError, InternalError, ValidationError
from src.bank_common.redis_client import close_redis, ping_redis
from src.bank_common.response import error_response
from src.bank_gateway.api.router import router as auth_router
from src.bank_gateway.api.security_router import router as security_router
from src.bank_gateway.middleware.request_log import RequestLogMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("bank.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections for the configured backends."""
    use_postgres = settings.STORAGE_BACKEND != "memory"
    use_redis = settings.SESSION_BACKEND != "memory"
    if use_postgres:
        from src.bank_common.database import engine

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    if use_redis:
        await ping_redis()
    logger.info(
        "started storage=%s sessions=%s", settings.STORAGE_BACKEND, settings.SESSION_BACKEND
    )
    yield
    if use_postgres:
        await engine.dispose()
    if use_redis:
        await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _envelope(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _envelope(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": str(err["loc"][-1]) if err.get("loc") else "body",
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    first = errors[0] if errors else {"field": "body", "message": "Invalid request"}
    err = ValidationError(first["field"], first["message"])
    err.data = {"field": first["field"], "errors": errors}
    return _envelope(request, err)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _envelope(request, InternalError())


app.include_router(auth_router, prefix="/api")
app.include_router(banking_router, prefix="/api")
app.include_router(services_router, prefix="/api")
app.include_router(games_router, prefix="/api")
app.include_router(security_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
