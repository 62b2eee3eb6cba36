"""Exception types raised by the lunar engine."""

from __future__ import annotations


class LunarCalculationError(RuntimeError):
    """Base class for failures of the lunar phase engine."""


class NonConvergenceError(LunarCalculationError):
    """Raised when an iterative routine exceeds its iteration ceiling."""

    def __init__(self, routine: str, iterations: int) -> None:
        super().__init__(f"{routine} did not converge within {iterations} iterations")
        self.routine = routine
        self.iterations = iterations


class InvalidPhaseSelectorError(LunarCalculationError, ValueError):
    """Raised when a true-phase refinement is asked for an unknown phase."""

    def __init__(self, selector: float) -> None:
        super().__init__(f"Invalid phase selector: {selector}")
        self.selector = selector


class UnsupportedDateError(LunarCalculationError, ValueError):
    """Raised when a Julian date has no Gregorian calendar equivalent."""

    def __init__(self, julian_date: float) -> None:
        super().__init__(f"Julian date {julian_date} is outside the supported calendar range")
        self.julian_date = julian_date
