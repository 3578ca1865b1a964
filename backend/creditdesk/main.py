"""
CreditDesk FastAPI Application
Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from creditdesk.config import settings
from creditdesk.core.error_handlers import register_exception_handlers
from creditdesk.core.rate_limit import limiter
from creditdesk.database import init_db, close_db

logger = logging.getLogger("creditdesk")

API = settings.api_prefix

# Paths that issue the first CSRF token
CSRF_EXEMPT_PATHS = {f"{API}/auth/login", f"{API}/auth/register"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and cleanup on shutdown.
    """
    from creditdesk.logging_config import setup_logging
    setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)

    logger.info("Starting %s backend", settings.app_name)

    # In production, use Alembic migrations instead
    if settings.debug:
        await init_db()
        logger.info("Database initialized (debug mode)")

    yield

    logger.info("Shutting down %s backend", settings.app_name)
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="""
    ## Credit-based Search Console API

    ### Features
    - **Accounts**: email/password sign in, admin-managed users, block/unblock
    - **Credit Ledger**: audited credit adjustments with an advisory limit
    - **Searches**: spend credits on address/segment lookups and download results
    """,
    version="0.1.0",
    docs_url=f"{API}/docs",
    redoc_url=f"{API}/redoc",
    openapi_url=f"{API}/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)


class CSRFMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if settings.csrf_enabled:
            # Only enforce on unsafe methods for API routes
            if request.method in {"POST", "PUT", "PATCH", "DELETE"} and request.url.path.startswith(API):
                if request.url.path not in CSRF_EXEMPT_PATHS:
                    cookie_token = request.cookies.get(settings.csrf_cookie_name)
                    header_token = request.headers.get(settings.csrf_header_name)

                    if not cookie_token or not header_token or cookie_token != header_token:
                        return JSONResponse(
                            status_code=403,
                            content={"detail": "CSRF validation failed"}
                        )

        return await call_next(request)


app.add_middleware(CSRFMiddleware)


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get(f"{API}/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "service": "creditdesk-backend",
        "version": "0.1.0"
    }


@app.get(f"{API}/health/db", tags=["Health"])
async def database_health():
    """Database connectivity check."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError
    from creditdesk.database import AsyncSessionLocal

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "disconnected", "error": str(e)},
        )


from creditdesk.api import auth, users, searches, settings as settings_api  # noqa: E402


# =============================================
# API Routers
# =============================================

app.include_router(auth.router, prefix=f"{API}/auth", tags=["Auth"])
app.include_router(users.router, prefix=f"{API}/users", tags=["Users"])
app.include_router(searches.router, prefix=f"{API}/searches", tags=["Searches"])
app.include_router(settings_api.router, prefix=f"{API}/settings", tags=["Settings"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "creditdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
