"""Iteration ceilings for the engine's two convergence loops."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

__all__ = ["IterationLimits", "DEFAULT_LIMITS", "load_limits"]

LOGGER = logging.getLogger(__name__)

KEPLER_ENV = "LUNAR_KEPLER_MAX_ITER"
HUNT_ENV = "LUNAR_HUNT_MAX_ITER"


@dataclass(frozen=True)
class IterationLimits:
    """Maximum iterations for the Kepler solver and the lunation search."""

    kepler: int = 100
    hunt: int = 24


DEFAULT_LIMITS = IterationLimits()


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_limits(env: Optional[Mapping[str, str]] = None) -> IterationLimits:
    """Build :class:`IterationLimits` from environment variables.

    ``LUNAR_KEPLER_MAX_ITER`` and ``LUNAR_HUNT_MAX_ITER`` override the
    defaults. Unset or empty variables keep them.

    Raises
    ------
    ValueError
        If a variable is set to something other than a positive integer.
    """

    source = os.environ if env is None else env
    limits = IterationLimits(
        kepler=_positive_int(source, KEPLER_ENV, DEFAULT_LIMITS.kepler),
        hunt=_positive_int(source, HUNT_ENV, DEFAULT_LIMITS.hunt),
    )
    if limits != DEFAULT_LIMITS:
        LOGGER.info(
            json.dumps(
                {"event": "iteration_limits", "kepler": limits.kepler, "hunt": limits.hunt}
            )
        )
    return limits
