"""
Order Splitter — FastAPI Application Entry Point

Wires the session router, error handlers and request logging, and builds
the collaborators (database tables, image host) once on startup.
"""
import time
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_splitter.config import get_settings
from order_splitter.database import init_db
from order_splitter.exceptions import OrderSplitterError, ValidationError
from order_splitter.logging_config import configure_logging
from order_splitter.routes import session_router
from order_splitter.schemas.schemas import HealthResponse
from order_splitter.services.image_host import ImageHostService

settings = get_settings()
logger = configure_logging(settings)

# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Split a shared restaurant bill between friends. Create a session with the "
        "order total, tax/service percentages and delivery fee; each friend joins with "
        "their items and gets a computed share; the organizer tracks who has paid."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)
app.state.settings = settings

# ─── Startup ─────────────────────────────────────────────────────────
BOOT_TIME = time.time()


@app.on_event("startup")
def on_startup():
    """Initialize database tables, build the image host and log boot info."""
    init_db()
    app.state.image_host = ImageHostService(settings)

    logger.info(
        "\n%s\n  %s v%s\n  TIME: %s\n  CLOUDINARY: %s\n  DATABASE: %s\n  DEBUG: %s\n%s",
        "=" * 60,
        settings.APP_NAME,
        settings.APP_VERSION,
        datetime.now().isoformat(),
        "[OK] Configured" if settings.cloudinary_configured else "[!] Missing",
        settings.DATABASE_URL,
        settings.DEBUG,
        "=" * 60,
    )


# ─── Middleware ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with timing."""
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 1)

    if request.url.path.startswith("/api"):
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration)

    return response


# ─── Error Handlers ──────────────────────────────────────────────────
def _field_errors(errors) -> list[dict]:
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        details.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = _field_errors(exc.errors())
    logger.warning("Validation failed on %s %s: %s", request.method, request.url.path, details)
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=getattr(exc, "headers", None))


@app.exception_handler(OrderSplitterError)
async def order_splitter_error_handler(request: Request, exc: OrderSplitterError):
    content = {"error": exc.message}
    if isinstance(exc, ValidationError):
        content["details"] = exc.details
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ─── API Routers ─────────────────────────────────────────────────────
app.include_router(session_router)


@app.get("/health", response_model=HealthResponse, tags=["System"])
def health():
    """Liveness check."""
    return HealthResponse(status="OK", message="Order Splitter API is running")


@app.get("/", tags=["System"])
def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "uptime_seconds": round(time.time() - BOOT_TIME, 1),
    }
