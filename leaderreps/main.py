import logging
from typing import Any, Dict

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from starlette.responses import JSONResponse

from .config import Settings, get_settings
from .db.monitoring import pool_snapshot
from .db.session import get_engine
from .errors import InvalidAssessment, ReflectionRequired, RoadmapError, TextTooShort
from .logging_config import configure_logging
from .routes import catalog_router, router

configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="LeaderReps Development Plan", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)
app.include_router(catalog_router)

ERROR_STATUS: Dict[str, int] = {
    "invalid_assessment": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "invalid_argument": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "text_too_short": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "reflection_too_short": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "scenario_too_short": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "not_found": status.HTTP_404_NOT_FOUND,
    "period_not_found": status.HTTP_404_NOT_FOUND,
    "reflection_required": status.HTTP_409_CONFLICT,
    "period_already_completed": status.HTTP_409_CONFLICT,
    "roadmap_exists": status.HTTP_409_CONFLICT,
    "persistence_failure": status.HTTP_503_SERVICE_UNAVAILABLE,
    "configuration_error": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error_body(exc: RoadmapError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, InvalidAssessment):
        body["problems"] = exc.problems
    if isinstance(exc, TextTooShort):
        body["minimum"] = exc.minimum
        body["length"] = exc.length
    if isinstance(exc, ReflectionRequired):
        body["period_index"] = exc.period_index
    return body


@app.exception_handler(RoadmapError)
async def roadmap_error_handler(request: Request, exc: RoadmapError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=_error_body(exc))


@app.get("/healthz")
def health(settings: Settings = Depends(get_settings)) -> Dict[str, str]:
    return {"status": "ok", "persistence_mode": settings.persistence_mode}


@app.get("/healthz/database")
def database_health(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    try:
        engine = get_engine()
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Database health check failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return {
        "status": "ok",
        "persistence_mode": settings.persistence_mode,
        "pool": pool_snapshot(engine),
    }
