"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PhaseName(str, Enum):
    """Principal phases reported by ``/moon/phasehunt``."""

    new_moon = "new_moon"
    first_quarter = "first_quarter"
    full_moon = "full_moon"
    last_quarter = "last_quarter"
    next_new_moon = "next_new_moon"


class PhaseQueryParams(BaseModel):
    """Validated query parameters for the ``/moon/phase`` endpoint."""

    model_config = ConfigDict(extra="forbid")

    at: Optional[datetime] = Field(
        None, description="Instant to evaluate (ISO-8601); naive values are read as UTC"
    )

    @field_validator("at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class PhaseHuntQueryParams(PhaseQueryParams):
    """Validated query parameters for the ``/moon/phasehunt`` endpoint."""

    offset_hours: Optional[float] = Field(
        None,
        ge=-24.0,
        le=24.0,
        description="Optional fixed offset in hours applied to derive local times",
    )


class PhaseResponse(BaseModel):
    """Instantaneous lunar phase payload."""

    ok: bool = True
    at_utc: str = Field(..., description="Evaluated instant in UTC (ISO-8601)")
    phase: float = Field(..., description="Fraction of the synodic month elapsed, 0 new, 0.5 full")
    illumination: float = Field(..., description="Illuminated fraction of the disc")
    age_days: float = Field(..., description="Days since the last new moon")
    distance_km: float
    angular_diameter_deg: float
    sun_distance_km: float
    sun_angular_diameter_deg: float
    ecliptic_longitude_deg: float
    ecliptic_latitude_deg: float
    parallax_deg: float
    source: Literal["moontool"] = Field("moontool", description="Model identifier")


class PhaseEvent(BaseModel):
    """One principal phase of a lunation."""

    name: PhaseName
    utc: str = Field(..., description="Time of the phase in UTC (ISO-8601)")
    local: Optional[str] = Field(
        None, description="Time of the phase in local time when an offset is provided"
    )


class PhaseHuntResponse(BaseModel):
    """Principal phases of the lunation containing the requested instant."""

    ok: bool = True
    at_utc: str
    lunation: int = Field(..., description="New moons since 1900 January")
    offset_hours: Optional[float] = None
    events: List[PhaseEvent]
    source: Literal["moontool"] = "moontool"


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    model: str
    epoch_jd: float
    synodic_month: float


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
