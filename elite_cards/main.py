# elite_cards/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from elite_cards.core import logging_config  # noqa: F401  configures logging on import
from elite_cards.core.config import get_settings
from elite_cards.core.exceptions import EliteCardsError
from elite_cards.database import engine
from elite_cards.routes import admin, auth, cron, health, pokemon_tcg, products
from elite_cards.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.ENABLE_SCHEDULER:
        await start_scheduler()
    else:
        logger.info("In-process scheduler disabled, price sync runs via /api/cron/sync-prices")
    try:
        yield
    finally:
        if settings.ENABLE_SCHEDULER:
            await stop_scheduler()
        await engine.dispose()


app = FastAPI(
    title="Elite Cards",
    lifespan=lifespan
)


# Add middleware to handle HTTPS behind proxy
@app.middleware("http")
async def proxy_headers_middleware(request: Request, call_next):
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_proto == "https":
        request.scope["scheme"] = "https"
    return await call_next(request)


# --- Error handlers: every error body is {"error": message} ---

@app.exception_handler(EliteCardsError)
async def service_error_handler(request: Request, exc: EliteCardsError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message or type(exc).__name__})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(part) for part in error["loc"] if part != "body") for error in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": "Missing or invalid fields", "fields": fields},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(auth.router)
app.include_router(products.router)
app.include_router(admin.router)
app.include_router(pokemon_tcg.router)
app.include_router(cron.router)
app.include_router(health.router)
