"""Finboard API main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from finboard.config import settings
from finboard.core.database import async_session_factory, engine
from finboard.core.middleware import RequestLoggingMiddleware

logger = structlog.get_logger()

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting Finboard API", env=settings.app_env)
    yield
    logger.info("Shutting down Finboard API")
    await engine.dispose()


app = FastAPI(
    title="Finboard API",
    description="Personal finance dashboard: accounts, categories, transactions, summary and billing",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    # Disable trailing slash redirects (307/308) which strip Authorization headers
    # when the frontend proxy follows the redirect cross-origin.
    redirect_slashes=False,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler: log the cause, answer with a JSON 500."""
    logger.exception("unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal error"})


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness check: healthy whenever the process is running."""
    return {"status": "healthy", "version": API_VERSION}


@app.get("/ready", tags=["system"])
async def readiness_check():
    """Readiness check: verifies DB connectivity."""
    checks = {"database": "unknown", "api": "ok"}
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
            checks["database"] = "ok"
    except Exception as e:
        logger.warning("readiness_check_failed", error=str(e))
        checks["database"] = f"error: {e}"
        return {"status": "degraded", "checks": checks}

    return {"status": "ready", "checks": checks}


# ── API Routes ────────────────────────────────────
from finboard.api.v1 import accounts, auth, categories, subscriptions, summary, transactions  # noqa: E402

app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(accounts.router, prefix="/api/v1/accounts", tags=["accounts"])
app.include_router(categories.router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(transactions.router, prefix="/api/v1/transactions", tags=["transactions"])
app.include_router(summary.router, prefix="/api/v1/summary", tags=["summary"])
app.include_router(subscriptions.router, prefix="/api/v1/subscriptions", tags=["subscriptions"])
