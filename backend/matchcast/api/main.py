"""
MatchCast - FastAPI Application

Entry point for the prediction service. Builds the app, wires logging,
CORS, error handling and the /api routers.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from matchcast.api.routes import predictions, parleys
from matchcast.application.dtos.dtos import HealthResponseDTO, ErrorResponseDTO
from matchcast.utils.time_utils import get_current_time, get_timezone_name


APP_TITLE = "MatchCast"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = """
**Football match forecasts from API-Football statistics.**

Each forecast combines a Poisson goal model (venue attack and defense against
the league scoring average) with head-to-head history and Bet365 match-winner
odds when they are available. Statistics fall back to earlier seasons when
the requested one has no data yet.

Endpoints: `POST /api/predict-match`, `GET /api/all-fixtures`,
`GET /api/parley-del-dia`.
"""

DEV_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
)

logger = logging.getLogger(__name__)


class LocalTimeFormatter(logging.Formatter):
    """Stamps log records with the fixtures timezone instead of server time."""

    def formatTime(self, record, datefmt=None):
        now = get_current_time()
        if datefmt:
            return now.strftime(datefmt)
        return f"{now.strftime('%Y-%m-%d %H:%M:%S')},{int(record.msecs):03d}"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single stream handler on the root logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        LocalTimeFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())


def allowed_origins() -> list[str]:
    """Development origins plus the comma-separated CORS_ORIGINS."""
    extra = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",")]
    return sorted({origin for origin in (*DEV_ORIGINS, *extra) if origin})


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {APP_TITLE} v{APP_VERSION}, fixtures timezone {get_timezone_name()}")
    if os.getenv("API_FOOTBALL_KEY"):
        logger.info("API-Football key found (api-sports host)")
    elif os.getenv("RAPIDAPI_KEY"):
        logger.info("API-Football key found (RapidAPI host)")
    else:
        logger.warning("No API-Football key set; predictions will fail upstream")

    yield

    logger.info(f"{APP_TITLE} stopped")


async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log with traceback, answer with an error body."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    body = ErrorResponseDTO(error="internal_server_error", details=str(exc))
    return JSONResponse(status_code=500, content=body.model_dump())


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    application = FastAPI(
        title=APP_TITLE,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(Exception, unhandled_exception)

    @application.get(
        "/health",
        response_model=HealthResponseDTO,
        tags=["Health"],
        summary="Health check",
    )
    async def health_check() -> HealthResponseDTO:
        return HealthResponseDTO(
            status="healthy",
            version=APP_VERSION,
            timestamp=get_current_time(),
        )

    @application.get("/", tags=["Root"], summary="API information")
    async def root():
        return {
            "name": APP_TITLE,
            "version": APP_VERSION,
            "documentation": "/docs",
            "health": "/health",
            "endpoints": {
                "predict_match": "POST /api/predict-match",
                "all_fixtures": "/api/all-fixtures?league=39&season=2025&next=10",
                "parley_of_the_day": "/api/parley-del-dia",
            },
        }

    application.include_router(predictions.router, prefix="/api")
    application.include_router(parleys.router, prefix="/api")
    return application


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "matchcast.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
