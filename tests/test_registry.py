"""Tests for HandlerRegistry and event registration."""

from networth_sim import (
    DEFAULT_REGISTRY,
    FinancialPhaseHandler,
    HandlerRegistry,
    IncomePulseHandler,
    LargeExpenseHandler,
    register_all_events,
)
from networth_sim.handlers import ALL_HANDLERS

CANONICAL_TYPES = {
    "financial-phase", "retirement", "outstanding-income", "large-expense",
    "student-loan", "recurring-expense", "house", "car-purchase",
    "side-hustle", "investment", "market-event",
}


class TestHandlerRegistry:
    def setup_method(self):
        self.registry = HandlerRegistry()

    def test_empty(self):
        assert len(self.registry) == 0
        assert self.registry.get("financial-phase") is None

    def test_register_and_get(self):
        h = IncomePulseHandler()
        self.registry.register("windfall", h)
        assert self.registry.get("windfall") is h
        assert "windfall" in self.registry

    def test_register_overwrites(self):
        first, second = IncomePulseHandler(), LargeExpenseHandler()
        self.registry.register("x", first)
        self.registry.register("x", second)
        assert self.registry.get("x") is second
        assert len(self.registry) == 1

    def test_clear(self):
        self.registry.register("x", IncomePulseHandler())
        self.registry.clear()
        assert len(self.registry) == 0


class TestRegisterAllEvents:
    def test_all_canonical_types(self):
        registry = register_all_events()
        assert CANONICAL_TYPES <= set(registry.types())
        assert len(ALL_HANDLERS) == len(CANONICAL_TYPES)

    def test_aliases_share_handler(self):
        registry = register_all_events()
        assert registry.get("income-phase") is registry.get("financial-phase")
        assert registry.get("goal") is registry.get("large-expense")
        assert registry.get("windfall") is registry.get("outstanding-income")

    def test_reregistration_is_deterministic(self):
        registry = HandlerRegistry()
        register_all_events(registry)
        before = {t: type(registry.get(t)) for t in registry.types()}
        registry.register("custom", IncomePulseHandler())
        register_all_events(registry)
        after = {t: type(registry.get(t)) for t in registry.types()}
        assert before == after
        assert "custom" not in registry

    def test_default_registry_populated(self):
        assert isinstance(DEFAULT_REGISTRY.get("financial-phase"), FinancialPhaseHandler)
