"""Tests for calculate_projection() and validation helpers."""

import copy

import pytest
from networth_sim import (
    AFTER_GROWTH,
    Event,
    EventHandler,
    HandlerRegistry,
    IncomePulseHandler,
    SimulationParams,
    calculate_projection,
    register_all_events,
    summarize_projection,
    validate_events,
)
from networth_sim.event_types import EVENT_TYPE_DEFAULTS


def _by_age(results: list[dict]) -> dict[int, float]:
    return {r["age"]: r["net_worth"] for r in results}


def _phase(age: int, **params) -> Event:
    return Event("financial-phase", age, params)


class TestResultShape:
    @pytest.mark.parametrize("start, end", [(15, 80), (30, 30), (0, 5)])
    def test_one_point_per_age(self, start, end):
        results = calculate_projection([_phase(start, startingNetWorth=100)], SimulationParams(start, end))
        assert len(results) == end - start + 1
        for i, point in enumerate(results):
            assert point["age"] == start + i

    def test_inverted_range_is_empty(self):
        assert calculate_projection([_phase(20)], SimulationParams(40, 30)) == []

    def test_no_events_stays_zero(self):
        results = calculate_projection([], SimulationParams(20, 25))
        assert [r["net_worth"] for r in results] == [0.0] * 6


class TestKnownScenarios:
    def test_single_phase_example(self):
        events = [_phase(15, startingNetWorth=1000, annualIncome=0, savingsRate=0, investmentReturn=10)]
        results = calculate_projection(events, SimulationParams(15, 16))
        assert [r["age"] for r in results] == [15, 16]
        assert results[0]["net_worth"] == pytest.approx(1000)
        assert results[1]["net_worth"] == pytest.approx(1100)

    def test_flat_line(self):
        events = [_phase(15, startingNetWorth=5000, annualIncome=0, savingsRate=0, investmentReturn=0)]
        results = calculate_projection(events, SimulationParams(15, 80))
        assert all(r["net_worth"] == 5000 for r in results)

    def test_overlapping_phases_switch_at_later_age(self):
        events = [
            _phase(20, startingNetWorth=1000, annualIncome=10000, savingsRate=10, investmentReturn=0),
            _phase(30, annualIncome=20000, savingsRate=50, investmentReturn=0),
        ]
        nw = _by_age(calculate_projection(events, SimulationParams(20, 35)))
        assert nw[20] == pytest.approx(1000)
        assert nw[29] == pytest.approx(10000)   # +1000/year from the first phase
        assert nw[30] == pytest.approx(20000)   # +10000/year from the second phase only
        assert nw[35] == pytest.approx(70000)

    def test_retirement_replaces_phase(self):
        events = [
            _phase(25, annualIncome=60000, savingsRate=25, investmentReturn=0),
            Event("retirement", 30, {"annualWithdrawal": 5000, "investmentReturn": 0}),
        ]
        nw = _by_age(calculate_projection(events, SimulationParams(25, 31)))
        assert nw[29] == pytest.approx(60000)
        assert nw[30] == pytest.approx(55000)
        assert nw[31] == pytest.approx(50000)

    def test_simulation_return_fallback(self):
        events = [_phase(20, startingNetWorth=1000)]
        nw = _by_age(calculate_projection(events, SimulationParams(20, 21, investment_return=10)))
        assert nw[21] == pytest.approx(1100)


class TestTimingPhases:
    """A before-growth lump sum earns the year's return; an after-growth one doesn't."""

    def setup_method(self):
        self.params = SimulationParams(20, 26)
        self.phase = _phase(20, startingNetWorth=10000, investmentReturn=10)
        self.baseline = _by_age(calculate_projection([self.phase], self.params))

    def test_before_growth_earns_return(self):
        windfall = Event("outstanding-income", 25, {"amount": 1000})
        nw = _by_age(calculate_projection([self.phase, windfall], self.params))
        assert nw[24] == pytest.approx(self.baseline[24])
        assert nw[25] - self.baseline[25] == pytest.approx(1100)
        assert nw[25] - self.baseline[25] > 1000

    def test_after_growth_adds_exact_amount(self):
        registry = register_all_events(HandlerRegistry())
        registry.register("late-windfall", IncomePulseHandler(timing=AFTER_GROWTH))
        windfall = Event("late-windfall", 25, {"amount": 1000})
        nw = _by_age(calculate_projection([self.phase, windfall], self.params, registry=registry))
        assert nw[25] - self.baseline[25] == pytest.approx(1000)

    def test_goal_withdrawal_after_growth(self):
        goal = Event("goal", 25, {"amount": 1000})
        nw = _by_age(calculate_projection([self.phase, goal], self.params))
        assert nw[25] - self.baseline[25] == pytest.approx(-1000)


class TestMarketEvents:
    def test_temporary_return_shift(self):
        phase = _phase(20, startingNetWorth=10000, investmentReturn=10)
        crash = Event("market-event", 25, {"duration": 2, "returnAdjustment": -20})
        nw = _by_age(calculate_projection([phase, crash], SimulationParams(20, 28)))
        assert nw[25] == pytest.approx(nw[24] * 0.9)
        assert nw[26] == pytest.approx(nw[25] * 0.9)
        # Adjustment must not leak into later years
        assert nw[27] == pytest.approx(nw[26] * 1.1)
        assert nw[28] == pytest.approx(nw[27] * 1.1)


class TestLoans:
    def test_repayments_after_placement_within_term(self):
        loan = Event("student-loan", 25, {"loanAmount": 0, "monthlyPayment": 100, "repaymentTerm": 3})
        nw = _by_age(calculate_projection([loan], SimulationParams(24, 30)))
        assert nw[24] == 0
        assert nw[25] == 0
        assert nw[26] == pytest.approx(-1200)
        assert nw[28] == pytest.approx(-3600)
        assert nw[29] == pytest.approx(-3600)
        assert nw[30] == pytest.approx(-3600)


class _Adder(EventHandler):
    HAS_IMMEDIATE_IMPACT = True

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        return net_worth + 100


class _Doubler(EventHandler):
    HAS_IMMEDIATE_IMPACT = True

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        return net_worth * 2


class TestOrdering:
    def setup_method(self):
        self.params = SimulationParams(30, 30)

    def _run(self, events, adder_priority, doubler_priority):
        registry = HandlerRegistry()
        registry.register("add", _Adder(priority=adder_priority))
        registry.register("double", _Doubler(priority=doubler_priority))
        return calculate_projection(events, self.params, registry=registry)[0]["net_worth"]

    def test_higher_priority_first(self):
        events = [Event("double", 30), Event("add", 30)]
        assert self._run(events, adder_priority=20, doubler_priority=10) == 200
        assert self._run(events, adder_priority=10, doubler_priority=20) == 100

    def test_ties_keep_input_order(self):
        assert self._run([Event("add", 30), Event("double", 30)], 5, 5) == 200
        assert self._run([Event("double", 30), Event("add", 30)], 5, 5) == 100


class TestRobustness:
    def setup_method(self):
        self.params = SimulationParams(18, 70)
        self.events = [
            _phase(18, startingNetWorth=2000, annualIncome=40000, savingsRate=15, investmentReturn=6),
            Event("student-loan", 18, {"loanAmount": 20000, "repaymentTerm": 10, "interestRate": 4}),
            Event("car-purchase", 25, EVENT_TYPE_DEFAULTS["car-purchase"]),
            Event("house", 32, EVENT_TYPE_DEFAULTS["house"]),
            Event("market-event", 40, {"duration": 3, "returnAdjustment": -15}),
            Event("side-hustle", 35, {"monthlyIncome": 300, "endDate": 45}),
            Event("recurring-expense", 30, {"amount": 50}),
            Event("investment", 28, {"amount": 5000, "returnRate": 8}),
            Event("outstanding-income", 50, {"amount": 30000}),
            Event("goal", 55, {"amount": 20000}),
            Event("retirement", 65, {"withdrawalRate": 4, "pensionIncome": 12000, "investmentReturn": 5}),
        ]

    def test_idempotent(self):
        first = calculate_projection(self.events, self.params)
        second = calculate_projection(self.events, self.params)
        assert first == second

    def test_events_not_mutated(self):
        snapshot = copy.deepcopy(self.events)
        calculate_projection(self.events, self.params)
        assert self.events == snapshot

    def test_unknown_type_is_inert(self):
        with_unknown = self.events + [Event("mystery", 30, {"amount": 1e9})]
        assert calculate_projection(with_unknown, self.params) == calculate_projection(self.events, self.params)

    @pytest.mark.parametrize("event_type", sorted(EVENT_TYPE_DEFAULTS) + ["income-phase", "goal", "windfall"])
    def test_empty_params_never_raise(self, event_type):
        results = calculate_projection([Event(event_type, 20, {})], SimulationParams(15, 40))
        assert len(results) == 26

    def test_malformed_values_default(self):
        events = [
            Event("house", 20, {"purchasePrice": "lots", "downPayment": None}),
            Event("student-loan", 20, {"loanAmount": "", "repaymentTerm": "ten"}),
        ]
        results = calculate_projection(events, SimulationParams(20, 25))
        assert [r["net_worth"] for r in results] == [0.0] * 6

    @pytest.mark.parametrize("term", ["nan", "inf", float("nan"), float("-inf")])
    def test_non_finite_loan_term(self, term):
        events = [Event("student-loan", 20, {"loanAmount": 1000, "repaymentTerm": term})]
        results = calculate_projection(events, SimulationParams(20, 25))
        # No usable term: the principal is charged once and nothing is repaid
        assert [r["net_worth"] for r in results] == [-1000.0] * 6

    def test_infinite_car_loan_term(self):
        events = [Event("car-purchase", 20, {"loanAmount": 1000, "interestRate": 5, "loanTerm": "inf"})]
        results = calculate_projection(events, SimulationParams(20, 25))
        assert len(results) == 6
        assert all(r["net_worth"] == 0 for r in results)

    def test_huge_interest_rate(self):
        events = [Event("student-loan", 20, {"loanAmount": 1000, "interestRate": 10000, "repaymentTerm": 30})]
        results = calculate_projection(events, SimulationParams(20, 22))
        # Interest-only limit: 1000 x 100% per year
        assert [r["net_worth"] for r in results] == pytest.approx([-1000, -101000, -201000])

    def test_extreme_compounding(self):
        events = [Event("side-hustle", 20, {"annualIncome": 1000, "growthRate": 1e6})]
        results = calculate_projection(events, SimulationParams(20, 140))
        assert len(results) == 121

    def test_events_outside_range_never_trigger(self):
        events = [Event("outstanding-income", 90, {"amount": 1000})]
        results = calculate_projection(events, SimulationParams(20, 30))
        assert all(r["net_worth"] == 0 for r in results)


class TestValidateEvents:
    def test_clean_timeline(self):
        events = [_phase(20), Event("house", 30, {"purchasePrice": 100000})]
        assert validate_events(events, SimulationParams(20, 60)) == []

    def test_unknown_type(self):
        warnings = validate_events([Event("mystery", 30)])
        assert len(warnings) == 1
        assert "unknown event type" in warnings[0]

    def test_outside_range(self):
        warnings = validate_events([_phase(10)], SimulationParams(20, 60))
        assert any("outside 20-60" in w for w in warnings)

    def test_regime_tie(self):
        events = [_phase(30), Event("retirement", 30)]
        warnings = validate_events(events)
        assert any("share age 30" in w for w in warnings)

    def test_handler_warnings_included(self):
        events = [Event("student-loan", 22, {"loanAmount": 1000, "repaymentTerm": 0})]
        assert any("repayment term" in w for w in validate_events(events))


class TestSummarizeProjection:
    def test_summary(self):
        results = [
            {"age": 30, "net_worth": 100.0},
            {"age": 31, "net_worth": 500.0},
            {"age": 32, "net_worth": -50.0},
        ]
        s = summarize_projection(results)
        assert s["final_age"] == 32
        assert s["final_net_worth"] == -50.0
        assert s["peak_age"] == 31
        assert s["peak_net_worth"] == 500.0
        assert s["first_negative_age"] == 32

    def test_empty(self):
        s = summarize_projection([])
        assert s["final_age"] is None
        assert s["first_negative_age"] is None
