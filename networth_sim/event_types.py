"""Event type catalog: parameter defaults and linked-field rules.

Used only on the caller side (timeline editing, config loading). The projection
engine never reads anything from here.
"""

import math

# Default params per event type, as a freshly placed event would carry them
EVENT_TYPE_DEFAULTS: dict[str, dict[str, float | str | None]] = {
    "financial-phase": {
        "startingNetWorth": 0,
        "annualIncome": 50000,
        "monthlyIncome": 4167,
        "investmentReturn": 7,
        "savingsRate": 20,
    },
    "outstanding-income": {"amount": 50000},
    "large-expense": {"amount": 10000},
    "house": {
        "purchasePrice": 300000,
        "downPayment": 20,
        "mortgageRate": 4.5,
        "mortgageTerm": 30,
        "appreciationRate": 3,
        "maintenanceCost": 3000,
        "propertyTax": 2000,
    },
    "investment": {"amount": 25000, "returnRate": 10},
    "market-event": {"startAge": None, "duration": 2, "returnAdjustment": -20},
    "recurring-expense": {
        "amount": 100,
        "frequency": "monthly",
        "startDate": None,
        "endDate": None,
    },
    "retirement": {
        "annualWithdrawal": 40000,
        "monthlyWithdrawal": 3333,
        "withdrawalRate": 4,
        "pensionIncome": 20000,
        "monthlyPensionIncome": 1667,
        "investmentReturn": 5,
    },
    "side-hustle": {
        "monthlyIncome": 500,
        "annualIncome": 6000,
        "growthRate": 10,
        "startDate": None,
        "endDate": None,
    },
    "student-loan": {
        "loanAmount": 40000,
        "interestRate": 5,
        "repaymentTerm": 10,
        "monthlyPayment": 424,
    },
    "car-purchase": {
        "purchasePrice": 25000,
        "downPayment": 5000,
        "loanAmount": 20000,
        "loanTerm": 5,
        "interestRate": 4,
        "insuranceCost": 1500,
        "monthlyInsuranceCost": 125,
        "maintenanceCost": 500,
        "monthlyMaintenanceCost": 42,
        "depreciationRate": 15,
    },
}

# Alternate tags accepted for the same event type
TYPE_ALIASES: dict[str, str] = {
    "income-phase": "financial-phase",
    "windfall": "outstanding-income",
    "goal": "large-expense",
}


def canonical_type(event_type: str) -> str:
    return TYPE_ALIASES.get(event_type, event_type)


def default_params(event_type: str) -> dict[str, float | str | None]:
    """Return a fresh copy of the default params for event_type ({} if unknown)."""
    return dict(EVENT_TYPE_DEFAULTS.get(canonical_type(event_type), {}))


# Editing one of a linked pair recomputes the other (annual <-> monthly)
FIELD_RULES = {
    "annualIncome": ("monthlyIncome", lambda v: round(v / 12)),
    "monthlyIncome": ("annualIncome", lambda v: round(v * 12)),
}


def apply_field_rules(field_name: str, value) -> dict:
    """Expand a single field edit into the full set of updates it implies."""
    updates = {field_name: value}
    rule = FIELD_RULES.get(field_name)
    if rule is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return updates
    if not math.isfinite(value):
        return updates
    linked, calculate = rule
    updates[linked] = calculate(value)
    return updates
