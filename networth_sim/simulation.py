"""Core projection engine."""

from collections import defaultdict

from networth_sim.handlers import AFTER_GROWTH, BEFORE_GROWTH, IMMEDIATE
from networth_sim.params import CalculationContext, SimulationParams
from networth_sim.registry import DEFAULT_REGISTRY, HandlerRegistry


def _sort_by_priority(events, registry: HandlerRegistry) -> list[tuple]:
    """Pair events with their handlers, highest priority first.

    Events without a handler are dropped. The sort is stable, so equal
    priorities keep input order.
    """
    paired = []
    for event in events:
        handler = registry.get(event.type)
        if handler is not None:
            paired.append((event, handler))
    return sorted(paired, key=lambda pair: -pair[1].priority)


def _apply_immediate_impacts(
    timing: str, age: int, ordered: list[tuple], net_worth: float,
    all_events: tuple, context: CalculationContext,
) -> tuple[float, CalculationContext]:
    """Apply one-time impacts of events placed at age for one timing phase."""
    for event, handler in ordered:
        if event.age != age or not handler.HAS_IMMEDIATE_IMPACT or handler.timing != timing:
            continue
        context = handler.modify_context(context, event, age)
        net_worth = handler.calculate_immediate_impact(net_worth, event, age, all_events, context)
    return net_worth, context


def _simulate_year(
    age: int, ordered: list[tuple], net_worth: float,
    all_events: tuple, context: CalculationContext,
) -> float:
    # Before-year hooks, then context modifiers active this year
    for event, handler in ordered:
        if event.age > age:
            continue
        net_worth = handler.before_year_calculation(age, net_worth, all_events, context)
        triggers_now = event.age == age and handler.HAS_IMMEDIATE_IMPACT
        if handler.MODIFIES_CONTEXT and not triggers_now:
            context = handler.modify_context(context, event, age)

    for timing in (BEFORE_GROWTH, IMMEDIATE):
        net_worth, context = _apply_immediate_impacts(
            timing, age, ordered, net_worth, all_events, context,
        )

    # Contributions all see the same pre-growth net worth
    total_growth = 0.0
    for event, handler in ordered:
        if event.age <= age and handler.AFFECTS_GROWTH:
            total_growth += handler.contribute_to_yearly_growth(net_worth, event, age, context)
    net_worth += total_growth

    net_worth, context = _apply_immediate_impacts(
        AFTER_GROWTH, age, ordered, net_worth, all_events, context,
    )

    # Ongoing impacts start the year after placement
    for event, handler in ordered:
        if event.age < age and handler.HAS_ONGOING_IMPACT:
            net_worth = handler.calculate_ongoing_impact(net_worth, event, age, all_events, context)

    for event, handler in ordered:
        if event.age <= age:
            net_worth = handler.after_year_calculation(age, net_worth, all_events, context)

    return net_worth


def calculate_projection(
    events,
    params: SimulationParams,
    registry: HandlerRegistry | None = None,
) -> list[dict]:
    """Project net worth for every age in [params.start_age, params.end_age].

    Returns one {"age", "net_worth"} dict per age. An inverted range gives an
    empty list. Events whose type has no registered handler have no effect.
    The event list is only read; each call recomputes from scratch.
    """
    if registry is None:
        registry = DEFAULT_REGISTRY
    all_events = tuple(events)
    ordered = _sort_by_priority(all_events, registry)
    base_context = CalculationContext(
        start_age=params.start_age,
        end_age=params.end_age,
        all_events=all_events,
        registry=registry,
        investment_return=params.investment_return,
    )

    net_worth = 0.0
    results = []
    for age in range(params.start_age, params.end_age + 1):
        net_worth = _simulate_year(age, ordered, net_worth, all_events, base_context.copy())
        results.append({"age": age, "net_worth": net_worth})
    return results


def validate_events(
    events,
    params: SimulationParams | None = None,
    registry: HandlerRegistry | None = None,
) -> list[str]:
    """Collect placement warnings. Returns list of messages; never raises."""
    if registry is None:
        registry = DEFAULT_REGISTRY
    all_events = tuple(events)
    warnings = []
    regime_ages: dict[tuple, list] = defaultdict(list)

    for event in all_events:
        handler = registry.get(event.type)
        if handler is None:
            warnings.append(f"unknown event type {event.type!r} at age {event.age}; it has no effect")
            continue
        if params is not None and not params.start_age <= event.age <= params.end_age:
            warnings.append(
                f"{event.type} at age {event.age} is outside {params.start_age}-{params.end_age}; "
                f"it never triggers"
            )
        warnings.extend(handler.validate(event, all_events))
        if handler.CATEGORY is not None:
            regime_ages[(handler.CATEGORY, event.age)].append(event)

    for (category, age), same_age in regime_ages.items():
        if len(same_age) > 1:
            types = ", ".join(e.type for e in same_age)
            warnings.append(
                f"{len(same_age)} {category} events share age {age} ({types}); "
                f"the last one listed takes effect"
            )
    return warnings


def summarize_projection(results: list[dict]) -> dict:
    """Final, peak and first-negative figures of a projection."""
    if not results:
        return {
            "final_age": None,
            "final_net_worth": 0.0,
            "peak_age": None,
            "peak_net_worth": 0.0,
            "first_negative_age": None,
        }
    peak = max(results, key=lambda r: r["net_worth"])
    first_negative = next((r["age"] for r in results if r["net_worth"] < 0), None)
    return {
        "final_age": results[-1]["age"],
        "final_net_worth": results[-1]["net_worth"],
        "peak_age": peak["age"],
        "peak_net_worth": peak["net_worth"],
        "first_negative_age": first_negative,
    }
