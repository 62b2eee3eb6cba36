"""FastAPI application exposing lunar phase computations."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta, timezone
from typing import Annotated, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lunar import (
    DEFAULT_LIMITS,
    ORBIT,
    IterationLimits,
    Moment,
    NonConvergenceError,
    load_limits,
    phase,
    phasehunt,
)
from models import (
    ErrorResponse,
    HealthResponse,
    PhaseEvent,
    PhaseHuntQueryParams,
    PhaseHuntResponse,
    PhaseName,
    PhaseQueryParams,
    PhaseResponse,
)

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("moon-api")

APP_DESCRIPTION = "Moon phase, age and lunar-month dates from the moontool analytic model"

LIMITS: IterationLimits = DEFAULT_LIMITS


def _apply_log_level(name: str) -> None:
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"LUNAR_LOG_LEVEL must be a logging level name, got {name!r}")
    logging.getLogger().setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global LIMITS
    try:
        _apply_log_level(os.environ.get("LUNAR_LOG_LEVEL", "INFO"))
        LIMITS = load_limits()
    except ValueError as exc:
        LOGGER.error(json.dumps({"event": "config_invalid", "error": str(exc)}))
        raise
    LOGGER.info(
        json.dumps({"event": "startup", "kepler_max_iter": LIMITS.kepler, "hunt_max_iter": LIMITS.hunt})
    )
    yield


def _cors_origins() -> List[str]:
    raw = os.environ.get("LUNAR_CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(
    title="Lunar Phase API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _format_utc(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _format_local(dt: datetime, offset_hours: Optional[float]) -> Optional[str]:
    if offset_hours is None:
        return None
    offset = timezone(timedelta(hours=offset_hours))
    return dt.astimezone(offset).isoformat()


def _resolve_moment(at: Optional[datetime]) -> Moment:
    return Moment.from_datetime(at) if at is not None else Moment.now()


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(NonConvergenceError)
async def non_convergence_handler(request: Request, exc: NonConvergenceError) -> JSONResponse:
    return _error_response(500, "non_convergence", str(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(
        ok=True,
        model="moontool",
        epoch_jd=ORBIT.epoch,
        synodic_month=ORBIT.synodic_month,
    )


@app.get(
    "/moon/phase",
    response_model=PhaseResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def phase_endpoint(params: Annotated[PhaseQueryParams, Query()]) -> PhaseResponse:
    start_time = time.perf_counter()
    try:
        when = _resolve_moment(params.at)
        snapshot = phase(when, limits=LIMITS)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    response = PhaseResponse(at_utc=_format_utc(when.to_datetime()), **snapshot.as_dict())

    LOGGER.info(
        json.dumps(
            {
                "event": "phase",
                "at": response.at_utc,
                "phase": round(snapshot.phase, 6),
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get(
    "/moon/phasehunt",
    response_model=PhaseHuntResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def phasehunt_endpoint(params: Annotated[PhaseHuntQueryParams, Query()]) -> PhaseHuntResponse:
    start_time = time.perf_counter()
    try:
        when = _resolve_moment(params.at)
        month = phasehunt(when, limits=LIMITS)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    duration_ms = (time.perf_counter() - start_time) * 1000.0

    events = []
    for name, moment in zip(PhaseName, month.as_tuple()):
        dt = moment.to_datetime()
        events.append(
            PhaseEvent(
                name=name,
                utc=_format_utc(dt),
                local=_format_local(dt, params.offset_hours),
            )
        )

    response = PhaseHuntResponse(
        at_utc=_format_utc(when.to_datetime()),
        lunation=month.lunation,
        offset_hours=params.offset_hours,
        events=events,
    )

    LOGGER.info(
        json.dumps(
            {
                "event": "phasehunt",
                "at": response.at_utc,
                "lunation": month.lunation,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response
