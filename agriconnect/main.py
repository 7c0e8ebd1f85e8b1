"""AgriConnect API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import __version__
from .config import get_settings
from .database import get_supabase_client
from .logging_config import configure_logging, get_logger
from .rate_limit import limiter
from .routes import (
    applications_router,
    auth_router,
    crops_router,
    dashboard_router,
    jobs_router,
    location_router,
    market_router,
    tools_router,
)
from .services import ServiceError

logger = get_logger("agriconnect.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    mode = "supabase" if settings.supabase_configured else "demo"
    logger.info(f"Starting AgriConnect API (debug={settings.debug}, mode={mode})")
    yield
    logger.info("Shutting down AgriConnect API")


app = FastAPI(
    title="AgriConnect API",
    description="Farm labour marketplace with crop price and smart tool advisories",
    version=__version__,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} | {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(jobs_router)
app.include_router(applications_router)
app.include_router(crops_router)
app.include_router(tools_router)
app.include_router(market_router)
app.include_router(location_router)
app.include_router(dashboard_router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": "agriconnect",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health")
async def health():
    """Detailed health check with actual database verification."""
    db = get_supabase_client()
    if db is None:
        return {"status": "healthy", "database": "demo"}

    try:
        db.table("profiles").select("id").limit(1).execute()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)[:50]}"

    overall_status = "healthy" if db_status == "connected" else "degraded"
    return {
        "status": overall_status,
        "database": db_status,
    }
