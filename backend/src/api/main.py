"""
Football Fixtures & Match Prediction API

FastAPI application: logging setup, CORS, error mapping for provider
failures, service endpoints and the versioned routers.
"""

import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from src.api.routes import config, highlights, leagues, matches, predictions, team_stats
from src.application.dtos.dtos import ErrorResponseDTO, HealthResponseDTO
from src.domain.exceptions import (
    ApiKeyNotConfiguredException,
    DataSourceException,
    RateLimitExceededException,
)
from src.utils.time_utils import SERVICE_TZ, get_current_time


class ServiceTimeFormatter(logging.Formatter):
    """Stamps log records in the service timezone (UTC)."""

    def formatTime(self, record, datefmt=None):
        stamp = datetime.fromtimestamp(record.created, SERVICE_TZ)
        if datefmt:
            return stamp.strftime(datefmt)
        return stamp.isoformat(timespec="milliseconds")


def configure_logging() -> None:
    stream = logging.StreamHandler()
    stream.setFormatter(ServiceTimeFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root = logging.getLogger()
    root.handlers = [stream]
    root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())


configure_logging()
logger = logging.getLogger(__name__)


APP_TITLE = "Football Fixtures & Match Prediction API"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = """
**Football fixtures, results and rule-based match predictions**

## Features

* **Fixtures & Results** - Supported competitions from Football-Data.org
* **Live Matches** - Today's matches currently in play
* **Team Statistics** - Form, home/away splits and recent windows
* **Head-to-Head** - Shared history of two teams
* **Predictions** - Winner, scoreline, BTTS, over/under 2.5, corners, bookings and combo
* **Highlights** - Match videos from ScoreBat

BTTS and over/under are always read off the predicted scoreline, so the
markets of one prediction never contradict each other.

---
**Educational purposes only** - Not for actual betting
"""

# Local frontends (Vite and CRA) on both hostnames
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def cors_origins() -> list[str]:
    """Default origins plus the comma-separated CORS_ORIGINS list."""
    extra = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",")]
    return sorted({o for o in DEFAULT_CORS_ORIGINS + extra if o})


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {APP_TITLE} v{APP_VERSION}")

    from src.api.dependencies import get_football_data_org
    from src.infrastructure.cache.redis_client import get_redis_client

    if get_football_data_org().is_configured:
        logger.info("✓ Football-Data.org configured")
    else:
        logger.warning("⚠ Football-Data.org not configured (set FOOTBALL_DATA_API_KEY)")

    if get_redis_client().is_connected:
        logger.info("✓ Redis cache connected")
    else:
        logger.info("Using in-memory caches")

    yield

    logger.info(f"{APP_TITLE} stopped")


app = FastAPI(
    title=APP_TITLE,
    description=APP_DESCRIPTION,
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, error: str, message: str, details: dict, headers=None) -> JSONResponse:
    body = ErrorResponseDTO(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


@app.exception_handler(RateLimitExceededException)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceededException):
    """Retryable: tell the client how long to wait."""
    logger.warning(f"Rate limit exceeded on {request.url.path}")
    return error_response(
        429,
        "rate_limit_exceeded",
        exc.message,
        {"retry_after_seconds": exc.retry_after_seconds},
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


@app.exception_handler(ApiKeyNotConfiguredException)
async def api_key_exception_handler(request: Request, exc: ApiKeyNotConfiguredException):
    return error_response(503, "api_key_not_configured", exc.message, {"env_var": "FOOTBALL_DATA_API_KEY"})


@app.exception_handler(DataSourceException)
async def data_source_exception_handler(request: Request, exc: DataSourceException):
    """Upstream provider failures, including a rejected API key."""
    logger.error(f"Upstream error on {request.url.path}: {exc.message}")
    return error_response(502, "upstream_error", exc.message, {"upstream_status": exc.status_code})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return error_response(
        500,
        "internal_server_error",
        "An unexpected error occurred",
        {"path": request.url.path},
    )


@app.get(
    "/health",
    response_model=HealthResponseDTO,
    tags=["Service"],
    summary="Liveness probe",
)
async def health_check() -> HealthResponseDTO:
    return HealthResponseDTO(status="healthy", version=APP_VERSION, timestamp=get_current_time())


@app.get(
    "/cache/status",
    tags=["Service"],
    summary="Cache status",
    description="Response cache backend and counters, plus the size of the prediction cache.",
)
async def cache_status():
    from src.api.dependencies import get_prediction_cache, get_response_cache

    response_cache = get_response_cache()
    prediction_stats = get_prediction_cache().stats()

    return {
        "redis_connected": response_cache.redis.is_connected,
        "response_cache": response_cache.stats(),
        "cached_predictions_count": prediction_stats.count,
        "oldest_prediction_timestamp": prediction_stats.oldest_timestamp,
    }


@app.get("/", tags=["Service"], summary="Endpoint index")
async def index():
    """Name, version and the main endpoints of the API."""
    return {
        "name": APP_TITLE,
        "version": APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "matches": "/api/v1/matches?days_back={n}&days_forward={n}",
            "live_matches": "/api/v1/matches/live",
            "leagues": "/api/v1/leagues",
            "team_stats": "/api/v1/team-stats?team_id={team_id}",
            "head_to_head": "/api/v1/head-to-head?home_team_id={id}&away_team_id={id}",
            "highlights": "/api/v1/highlights",
            "match_highlight": "/api/v1/highlights/match?home_team={name}&away_team={name}",
            "predictions": "/api/v1/predictions/{fixture_id}?home_team={name}&away_team={name}",
            "prediction_cache": "/api/v1/predictions/cache/stats",
            "api_key_status": "/api/v1/config/api-key",
        },
    }


API_PREFIX = "/api/v1"

app.include_router(matches.router, prefix=f"{API_PREFIX}/matches")
for module in (leagues, team_stats, highlights, predictions, config):
    app.include_router(module.router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
