"""Moon phase, age and lunar-month dates from an analytic moontool model."""

from .config import DEFAULT_LIMITS, IterationLimits, load_limits
from .constants import ORBIT, OrbitalConstants
from .errors import (
    InvalidPhaseSelectorError,
    LunarCalculationError,
    NonConvergenceError,
    UnsupportedDateError,
)
from .moon import PhaseSnapshot, phase
from .orbits import LunarPosition, SolarPosition, kepler, lunar_position, solar_position
from .phases import (
    LunarMonthKeyDates,
    PhaseSelector,
    lunations,
    mean_phase,
    phasehunt,
    true_phase,
)
from .timescale import Moment

__all__ = [
    "DEFAULT_LIMITS",
    "IterationLimits",
    "InvalidPhaseSelectorError",
    "LunarCalculationError",
    "LunarMonthKeyDates",
    "LunarPosition",
    "Moment",
    "NonConvergenceError",
    "ORBIT",
    "OrbitalConstants",
    "PhaseSelector",
    "PhaseSnapshot",
    "SolarPosition",
    "UnsupportedDateError",
    "kepler",
    "load_limits",
    "lunar_position",
    "lunations",
    "mean_phase",
    "phase",
    "phasehunt",
    "solar_position",
    "true_phase",
]
