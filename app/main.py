"""FastAPI application initialization and configuration."""

import logging
import time
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.api.v1.endpoints.digimon import limiter, router as digimon_router
from app.config import settings
from app.db.digimon_source import DigimonSourceError
from app.web.pages import router as pages_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

# Create FastAPI app
app = FastAPI(
    title="Digimon Explorer",
    description="Browse the Digimon catalogue and filter it by name and level.",
    version="1.0.0",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    openapi_url="/api/v1/openapi.json",
)

# --- Middleware ---

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Request logging
@app.middleware("http")
async def log_requests(request: Request, call_next) -> Response:
    """Log every incoming request and its duration."""
    start = time.perf_counter()
    response: Response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %s (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


# Upstream failures
@app.exception_handler(DigimonSourceError)
async def digimon_source_error_handler(request: Request, exc: DigimonSourceError) -> JSONResponse:
    """Map Digimon API failures to 503 Service Unavailable."""
    return JSONResponse(
        status_code=503,
        content={"success": False, "error": "Service Unavailable", "detail": str(exc)},
    )


# Static files (stylesheet)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Register routes
app.include_router(digimon_router, prefix="/api/v1", tags=["digimon"])
app.include_router(pages_router, tags=["pages"])

logger.info("Digimon Explorer started (debug=%s, source=%s)", settings.DEBUG, settings.DIGIMON_API_URL)
