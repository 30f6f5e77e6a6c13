"""Event handler classes.

Each event type has one handler. The base class defines the full capability set
with neutral defaults; subclasses override only the hooks they need and carry
their calculation settings as class-level configuration.
"""

from typing import ClassVar

from networth_sim.params import (
    CalculationContext,
    annual,
    annual_loan_payment,
    growth_factor,
    num,
)

# Timing phases for one-time impacts
BEFORE_GROWTH = "before-growth"
IMMEDIATE = "immediate"
AFTER_GROWTH = "after-growth"
TIMINGS = (BEFORE_GROWTH, IMMEDIATE, AFTER_GROWTH)

# Category shared by working phases and retirement: a later one replaces an earlier one
REGIME = "regime"


class EventHandler:
    """Base class for event handlers"""

    TYPE: ClassVar[str] = ""
    PRIORITY: ClassVar[int] = 100
    TIMING: ClassVar[str] = IMMEDIATE
    HAS_IMMEDIATE_IMPACT: ClassVar[bool] = False
    HAS_ONGOING_IMPACT: ClassVar[bool] = False
    AFFECTS_GROWTH: ClassVar[bool] = False
    MODIFIES_CONTEXT: ClassVar[bool] = False
    CATEGORY: ClassVar[str | None] = None

    def __init__(self, *, priority: int | None = None, timing: str | None = None):
        if timing is not None and timing not in TIMINGS:
            raise ValueError(f"unknown timing {timing!r} (expected one of {', '.join(TIMINGS)})")
        self._priority = self.PRIORITY if priority is None else int(priority)
        self._timing = self.TIMING if timing is None else timing

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self._priority}, timing={self._timing!r})"

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def timing(self) -> str:
        return self._timing

    def before_year_calculation(self, age, net_worth, all_events, context) -> float:
        return net_worth

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context) -> float:
        return net_worth

    def calculate_ongoing_impact(self, net_worth, event, current_age, all_events, context) -> float:
        return net_worth

    def contribute_to_yearly_growth(self, net_worth, event, current_age, context) -> float:
        return 0.0

    def modify_context(self, context: CalculationContext, event, current_age) -> CalculationContext:
        return context

    def after_year_calculation(self, age, net_worth, all_events, context) -> float:
        return net_worth

    def get_hover_stats(self, event, age) -> dict:
        return {}

    def validate(self, event, all_events) -> list[str]:
        """Placement warnings for the caller. Never affects the projection."""
        return []


def _is_opening_event(event, all_events) -> bool:
    """True when nothing on the timeline is placed earlier than event."""
    return not any(other.age < event.age for other in all_events)


def _active_instance(event, current_age: int, context: CalculationContext):
    """Latest-placed same-category event at or before current_age.

    Ties on placement age go to the event appearing last in the input list.
    """
    if context.registry is not None:
        category = context.category_of(event.type)

        def same(other):
            return context.category_of(other.type) == category
    else:
        def same(other):
            return other.type == event.type

    active = None
    for candidate in context.all_events:
        if candidate.age > current_age or not same(candidate):
            continue
        if active is None or candidate.age >= active.age:
            active = candidate
    return active


def _is_growing_regime(event, current_age: int, context: CalculationContext) -> bool:
    if current_age < event.age:
        return False
    if _active_instance(event, current_age, context) is not event:
        return False
    # The opening balance is the year-end value of its placement year
    if current_age == event.age and _is_opening_event(event, context.all_events):
        return False
    return True


def _opening_balance(net_worth: float, event, all_events) -> float:
    """Absolute starting net worth for the timeline's first event; otherwise unchanged."""
    if _is_opening_event(event, all_events):
        return num(event.params, "startingNetWorth")
    return net_worth


def _market_return(params, key: str, context: CalculationContext) -> float:
    """Return rate (%) for market-exposed money, including this year's adjustment."""
    rate = num(params, key, None)
    if rate is None:
        rate = context.investment_return or 0.0
    return rate + context.return_adjustment


def _within(current_age: float, start: float, end: float | None) -> bool:
    return current_age >= start and (end is None or current_age <= end)


class FinancialPhaseHandler(EventHandler):
    """Working-life phase: savings out of income plus return on net worth.

    The first event on the whole timeline sets the absolute starting net worth;
    later phases only change the growth parameters from their age onward.
    """

    TYPE = "financial-phase"
    PRIORITY = 1000
    HAS_IMMEDIATE_IMPACT = True
    AFFECTS_GROWTH = True
    CATEGORY = REGIME

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        return _opening_balance(net_worth, event, all_events)

    def contribute_to_yearly_growth(self, net_worth, event, current_age, context):
        if not _is_growing_regime(event, current_age, context):
            return 0.0
        income = annual(event.params, "annualIncome", "monthlyIncome")
        savings = income * num(event.params, "savingsRate") / 100
        return savings + net_worth * _market_return(event.params, "investmentReturn", context) / 100

    def get_hover_stats(self, event, age):
        return {
            "Annual Income": annual(event.params, "annualIncome", "monthlyIncome"),
            "Savings Rate": f"{num(event.params, 'savingsRate'):g}%",
            "Investment Return": f"{num(event.params, 'investmentReturn'):g}%",
        }


class RetirementHandler(EventHandler):
    """Retirement regime: portfolio return minus withdrawals plus pension."""

    TYPE = "retirement"
    PRIORITY = 1000
    HAS_IMMEDIATE_IMPACT = True
    AFFECTS_GROWTH = True
    CATEGORY = REGIME

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        return _opening_balance(net_worth, event, all_events)

    def contribute_to_yearly_growth(self, net_worth, event, current_age, context):
        if not _is_growing_regime(event, current_age, context):
            return 0.0
        withdrawal_rate = num(event.params, "withdrawalRate")
        if withdrawal_rate:
            withdrawal = max(net_worth, 0.0) * withdrawal_rate / 100
        else:
            withdrawal = annual(event.params, "annualWithdrawal", "monthlyWithdrawal")
        pension = annual(event.params, "pensionIncome", "monthlyPensionIncome")
        growth = net_worth * _market_return(event.params, "investmentReturn", context) / 100
        return growth - withdrawal + pension

    def get_hover_stats(self, event, age):
        return {
            "Annual Withdrawal": annual(event.params, "annualWithdrawal", "monthlyWithdrawal"),
            "Withdrawal Rate": f"{num(event.params, 'withdrawalRate'):g}%",
            "Pension Income": annual(event.params, "pensionIncome", "monthlyPensionIncome"),
            "Investment Return": f"{num(event.params, 'investmentReturn'):g}%",
        }


class IncomePulseHandler(EventHandler):
    """One-time windfall, credited before growth so it earns the same year's return."""

    TYPE = "outstanding-income"
    PRIORITY = 500
    TIMING = BEFORE_GROWTH
    HAS_IMMEDIATE_IMPACT = True

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        return net_worth + num(event.params, "amount")

    def get_hover_stats(self, event, age):
        return {
            "Income Amount": num(event.params, "amount"),
            "Type": "One-time payment",
            "Impact Timing": self.timing,
        }


class LargeExpenseHandler(EventHandler):
    """One-time expense, charged after growth so it doesn't shrink that year's growth base."""

    TYPE = "large-expense"
    PRIORITY = 500
    TIMING = AFTER_GROWTH
    HAS_IMMEDIATE_IMPACT = True

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        return net_worth - num(event.params, "amount")

    def get_hover_stats(self, event, age):
        return {
            "Expense Amount": num(event.params, "amount"),
            "Type": "One-time expense",
            "Impact Timing": self.timing,
        }


class StudentLoanHandler(EventHandler):
    """Loan taken at placement, repaid yearly for repaymentTerm years."""

    TYPE = "student-loan"
    PRIORITY = 450
    HAS_IMMEDIATE_IMPACT = True
    HAS_ONGOING_IMPACT = True

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        return net_worth - num(event.params, "loanAmount")

    def _annual_payment(self, params) -> float:
        monthly = num(params, "monthlyPayment")
        if monthly:
            return monthly * 12
        return annual_loan_payment(
            num(params, "loanAmount"), num(params, "interestRate"), num(params, "repaymentTerm"),
        )

    def calculate_ongoing_impact(self, net_worth, event, current_age, all_events, context):
        years_since_start = current_age - event.age
        if years_since_start <= 0 or years_since_start > num(event.params, "repaymentTerm"):
            return net_worth
        return net_worth - self._annual_payment(event.params)

    def get_hover_stats(self, event, age):
        loan = num(event.params, "loanAmount")
        rate = num(event.params, "interestRate")
        term = num(event.params, "repaymentTerm")
        years = max(0, age - event.age)
        paid = self._annual_payment(event.params) * min(years, term)
        remaining = loan * growth_factor(rate, years) - paid
        return {
            "Loan Amount": loan,
            "Interest Rate": f"{rate:g}%",
            "Annual Payment": self._annual_payment(event.params),
            "Remaining Balance": max(remaining, 0.0),
            "Years Left": max(term - years, 0),
        }

    def validate(self, event, all_events):
        if num(event.params, "loanAmount") > 0 and num(event.params, "repaymentTerm") <= 0:
            return [f"student-loan at age {event.age} has no repayment term; no repayments will be applied"]
        return []


class RecurringExpenseHandler(EventHandler):
    """Monthly or annual expense charged every year within [startDate, endDate]."""

    TYPE = "recurring-expense"
    PRIORITY = 400
    TIMING = AFTER_GROWTH
    HAS_ONGOING_IMPACT = True

    @staticmethod
    def _window(event) -> tuple[float, float | None]:
        return num(event.params, "startDate", event.age), num(event.params, "endDate", None)

    @staticmethod
    def _yearly_amount(params) -> float:
        amount = num(params, "amount")
        return amount if params.get("frequency") == "annually" else amount * 12

    def calculate_ongoing_impact(self, net_worth, event, current_age, all_events, context):
        start, end = self._window(event)
        if not _within(current_age, start, end):
            return net_worth
        return net_worth - self._yearly_amount(event.params)

    def get_hover_stats(self, event, age):
        start, end = self._window(event)
        frequency = event.params.get("frequency") or "monthly"
        return {
            "Amount": f"{num(event.params, 'amount'):g} ({frequency})",
            "Status": "Active" if _within(age, start, end) else "Inactive",
            "Period": f"{start:g} - {'End' if end is None else f'{end:g}'}",
        }


class HouseHandler(EventHandler):
    """House purchase: down payment up front, then appreciation less upkeep each year."""

    TYPE = "house"
    PRIORITY = 300
    HAS_IMMEDIATE_IMPACT = True
    HAS_ONGOING_IMPACT = True

    DEFAULT_DOWN_PAYMENT_PCT = 20
    DEFAULT_APPRECIATION_PCT = 3

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        price = num(event.params, "purchasePrice")
        down_pct = num(event.params, "downPayment", self.DEFAULT_DOWN_PAYMENT_PCT)
        return net_worth - price * down_pct / 100

    def calculate_ongoing_impact(self, net_worth, event, current_age, all_events, context):
        price = num(event.params, "purchasePrice")
        appreciation = price * num(event.params, "appreciationRate", self.DEFAULT_APPRECIATION_PCT) / 100
        upkeep = num(event.params, "maintenanceCost") + num(event.params, "propertyTax")
        return net_worth + appreciation - upkeep

    def get_hover_stats(self, event, age):
        price = num(event.params, "purchasePrice")
        rate = num(event.params, "appreciationRate", self.DEFAULT_APPRECIATION_PCT)
        down_pct = num(event.params, "downPayment", self.DEFAULT_DOWN_PAYMENT_PCT)
        years = max(0, age - event.age)
        mortgage = annual_loan_payment(
            price * (1 - down_pct / 100),
            num(event.params, "mortgageRate"),
            num(event.params, "mortgageTerm"),
        )
        return {
            "Purchase Price": price,
            "Current Value": price * growth_factor(rate, years),
            "Appreciation Rate": f"{rate:g}%/year",
            "Monthly Mortgage Payment": mortgage / 12,
            "Years Owned": years,
        }

    def validate(self, event, all_events):
        down_pct = num(event.params, "downPayment", self.DEFAULT_DOWN_PAYMENT_PCT)
        if not 0 <= down_pct <= 100:
            return [f"house at age {event.age}: down payment {down_pct:g}% is outside 0-100%"]
        return []


class CarPurchaseHandler(EventHandler):
    """Car bought with a down payment and a loan; the car loses value every year."""

    TYPE = "car-purchase"
    PRIORITY = 300
    HAS_IMMEDIATE_IMPACT = True
    HAS_ONGOING_IMPACT = True

    DEFAULT_DEPRECIATION_PCT = 15

    def calculate_immediate_impact(self, net_worth, event, age, all_events, context):
        return net_worth - num(event.params, "downPayment")

    def _value(self, params, years: float) -> float:
        depreciation_pct = num(params, "depreciationRate", self.DEFAULT_DEPRECIATION_PCT)
        return num(params, "purchasePrice") * growth_factor(-depreciation_pct, years)

    def calculate_ongoing_impact(self, net_worth, event, current_age, all_events, context):
        params = event.params
        years = current_age - event.age
        if years <= 0:
            return net_worth
        cost = annual(params, "insuranceCost", "monthlyInsuranceCost")
        cost += annual(params, "maintenanceCost", "monthlyMaintenanceCost")
        term = num(params, "loanTerm")
        if years <= term:
            cost += annual_loan_payment(num(params, "loanAmount"), num(params, "interestRate"), term)
        value_change = self._value(params, years) - self._value(params, years - 1)
        return net_worth - cost + value_change

    def get_hover_stats(self, event, age):
        years = max(0, age - event.age)
        rate = num(event.params, "depreciationRate", self.DEFAULT_DEPRECIATION_PCT)
        return {
            "Purchase Price": num(event.params, "purchasePrice"),
            "Current Value": self._value(event.params, years),
            "Depreciation Rate": f"{rate:g}%/year",
            "Years Owned": years,
        }


class SideHustleHandler(EventHandler):
    """Extra income growing by growthRate per year while active."""

    TYPE = "side-hustle"
    PRIORITY = 250
    AFFECTS_GROWTH = True

    def contribute_to_yearly_growth(self, net_worth, event, current_age, context):
        start = num(event.params, "startDate", event.age)
        end = num(event.params, "endDate", None)
        if not _within(current_age, start, end):
            return 0.0
        income = annual(event.params, "annualIncome", "monthlyIncome")
        return income * growth_factor(num(event.params, "growthRate"), current_age - start)

    def get_hover_stats(self, event, age):
        start = num(event.params, "startDate", event.age)
        end = num(event.params, "endDate", None)
        monthly = annual(event.params, "annualIncome", "monthlyIncome") / 12
        growth = num(event.params, "growthRate")
        current = monthly * growth_factor(growth, max(0, age - start))
        return {
            "Starting Income": f"{monthly:.2f}/month",
            "Current Income": f"{current:.2f}/month",
            "Growth Rate": f"{growth:g}%/year",
            "Status": "Active" if _within(age, start, end) else "Inactive",
        }


class InvestmentHandler(EventHandler):
    """Money moved into a separate investment: no net-worth change, yearly return on amount."""

    TYPE = "investment"
    PRIORITY = 200
    HAS_IMMEDIATE_IMPACT = True
    AFFECTS_GROWTH = True

    def contribute_to_yearly_growth(self, net_worth, event, current_age, context):
        if current_age < event.age:
            return 0.0
        return num(event.params, "amount") * _market_return(event.params, "returnRate", context) / 100

    def get_hover_stats(self, event, age):
        return {
            "Amount": num(event.params, "amount"),
            "Return Rate": f"{num(event.params, 'returnRate'):g}%",
        }


class MarketEventHandler(EventHandler):
    """Temporary shift of market returns (crash or boom) for `duration` years."""

    TYPE = "market-event"
    PRIORITY = 100
    MODIFIES_CONTEXT = True

    @staticmethod
    def _window(event) -> tuple[float, float]:
        start = num(event.params, "startAge", event.age)
        return start, start + num(event.params, "duration", 1)

    def modify_context(self, context, event, current_age):
        start, end = self._window(event)
        if start <= current_age < end:
            context.return_adjustment += num(event.params, "returnAdjustment")
        return context

    def get_hover_stats(self, event, age):
        start, end = self._window(event)
        return {
            "Start Age": start,
            "Duration": f"{end - start:g} years",
            "Return Adjustment": f"{num(event.params, 'returnAdjustment'):g}%",
        }


ALL_HANDLERS: tuple[type[EventHandler], ...] = (
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
)
