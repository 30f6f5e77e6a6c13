"""Event-driven net worth projection package."""

from networth_sim.params import SimulationParams, CalculationContext
from networth_sim.events import Event, EventTimeline
from networth_sim.handlers import (
    EventHandler,
    FinancialPhaseHandler,
    RetirementHandler,
    IncomePulseHandler,
    LargeExpenseHandler,
    StudentLoanHandler,
    RecurringExpenseHandler,
    HouseHandler,
    CarPurchaseHandler,
    SideHustleHandler,
    InvestmentHandler,
    MarketEventHandler,
    BEFORE_GROWTH,
    IMMEDIATE,
    AFTER_GROWTH,
)
from networth_sim.registry import HandlerRegistry, register_all_events, DEFAULT_REGISTRY
from networth_sim.simulation import (
    calculate_projection,
    validate_events,
    summarize_projection,
)

__all__ = [
    "SimulationParams",
    "CalculationContext",
    "Event",
    "EventTimeline",
    "EventHandler",
    "FinancialPhaseHandler",
    "RetirementHandler",
    "IncomePulseHandler",
    "LargeExpenseHandler",
    "StudentLoanHandler",
    "RecurringExpenseHandler",
    "HouseHandler",
    "CarPurchaseHandler",
    "SideHustleHandler",
    "InvestmentHandler",
    "MarketEventHandler",
    "BEFORE_GROWTH",
    "IMMEDIATE",
    "AFTER_GROWTH",
    "HandlerRegistry",
    "register_all_events",
    "DEFAULT_REGISTRY",
    "calculate_projection",
    "validate_events",
    "summarize_projection",
]
