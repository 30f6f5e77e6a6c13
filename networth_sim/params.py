"""Simulation parameters, per-year calculation context and numeric helpers."""

import dataclasses
import math
from dataclasses import dataclass
from typing import Any

DEFAULT_START_AGE = 15
DEFAULT_END_AGE = 80


@dataclass
class SimulationParams:

    start_age: int = DEFAULT_START_AGE
    end_age: int = DEFAULT_END_AGE
    # Fallback annual return (%) for regimes that don't set their own
    investment_return: float | None = None


@dataclass
class CalculationContext:
    """Per-year scratch state shared by handlers within one simulated year.

    The engine keeps one base context per run and hands each year a shallow
    copy, so modifier changes never carry over into the following year.
    """

    start_age: int
    end_age: int
    all_events: tuple = ()
    registry: Any = None
    investment_return: float | None = None
    # Percentage points added to market returns for the current year
    return_adjustment: float = 0.0

    def copy(self) -> "CalculationContext":
        return dataclasses.replace(self)

    def category_of(self, event_type: str) -> str | None:
        """Return the regime category of an event type, or None if unknown."""
        if self.registry is None:
            return None
        handler = self.registry.get(event_type)
        return handler.CATEGORY if handler is not None else None


def num(params: dict | None, key: str, default: float | None = 0.0) -> float | None:
    """Read a numeric param; missing, empty, non-numeric or non-finite values fall back to default."""
    if not params:
        return default
    value = params.get(key)
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        value = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return value if math.isfinite(value) else default


def annual(params: dict | None, annual_key: str, monthly_key: str) -> float:
    """Annual figure, falling back to monthly x 12 when the annual one is absent or zero."""
    amount = num(params, annual_key)
    if amount:
        return amount
    return num(params, monthly_key) * 12


def _calc_equal_payment(principal: float, monthly_rate: float, months: int) -> float:
    """Calculate monthly loan payment (level amortization)"""
    if months <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / months
    r = monthly_rate
    n = months
    try:
        growth = (1 + r) ** n
    except OverflowError:
        # Interest-only limit of the annuity as (1 + r) ** n grows without bound
        return principal * r
    return principal * r * growth / (growth - 1)


def annual_loan_payment(principal: float, annual_rate_pct: float, term_years: float) -> float:
    """Yearly total of level monthly payments for a loan quoted in % per year."""
    monthly_rate = annual_rate_pct / 100 / 12
    try:
        months = int(round(term_years * 12))
    except OverflowError:
        return principal * monthly_rate * 12
    return _calc_equal_payment(principal, monthly_rate, months) * 12


def growth_factor(rate_pct: float, years: float) -> float:
    """(1 + rate)^years for a rate in %, floored at zero; overflow saturates to inf."""
    base = max(1 + rate_pct / 100, 0.0)
    try:
        return base ** years
    except (OverflowError, ZeroDivisionError):
        return math.inf
