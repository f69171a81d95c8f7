"""
Storefront API: FastAPI Application

Product catalog, user accounts, image upload, and transactional order
placement with stock reservation.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import build_engine, build_session_factory, init_db
from domain.enums import PriceSource
from domain.responses import error_response
from routes import health, orders, products, upload, users
from services.order_service import OrderTransactionManager

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: build the store handle and order manager. Shutdown: dispose the pool."""
    settings.validate_production_settings()

    if settings.async_database_url.startswith("sqlite+aiosqlite:///./"):
        # Ensure data/ directory exists for file-backed SQLite
        os.makedirs("data", exist_ok=True)

    engine = build_engine(
        settings.async_database_url,
        echo=False,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout_seconds,
        connect_timeout=settings.db_connect_timeout_seconds,
    )
    await init_db(engine)
    logger.info("Database initialized")

    session_factory = build_session_factory(engine)
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.order_manager = OrderTransactionManager(
        session_factory,
        price_source=PriceSource(settings.order_price_source),
        verify_buyer=settings.order_verify_buyer,
        expose_store_errors=settings.debug_errors,
    )

    yield  # app runs here

    from services.async_executor import shutdown_executor
    shutdown_executor()

    await engine.dispose()
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Storefront API",
    description="Product catalog, users, image upload, and transactional orders",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(products.router)
app.include_router(users.router)
app.include_router(orders.router)
app.include_router(upload.router)


@app.get("/api", tags=["health"])
async def api_index():
    """List the API's endpoint groups."""
    return {
        "name": app.title,
        "version": app.version,
        "endpoints": {
            "products": "/api/products",
            "users": "/api/users",
            "orders": "/api/orders",
            "upload": "/api/upload",
            "health": "/health",
        },
    }


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never return raw exception details to clients; the traceback is
    logged server-side.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response("internal_server_error", "Internal server error"),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Standardize HTTPException responses for frontend consumers.

    Keeps the original HTTP status code and headers, but wraps the payload.
    """
    headers = getattr(exc, "headers", None)

    if hasattr(exc, "message") and hasattr(exc, "details"):
        # DomainError with structured error info
        error_code = exc.__class__.__name__.replace("Error", "").lower()
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(error_code, exc.message, exc.details),
            headers=headers,
        )

    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response("http_error", message, detail if not isinstance(detail, str) else None),
        headers=headers,
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
