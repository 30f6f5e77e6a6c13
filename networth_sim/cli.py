"""CLI entry point: project net worth for a scenario file and print a yearly table."""

import argparse
import sys

from networth_sim.config import parse_args
from networth_sim.params import SimulationParams
from networth_sim.registry import DEFAULT_REGISTRY
from networth_sim.simulation import calculate_projection, summarize_projection, validate_events


def _add_cli_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--every", type=int, default=5,
        help="print every N years; first and last year are always shown (default: 5)",
    )
    parser.add_argument(
        "--list-types", action="store_true",
        help="list supported event types and exit",
    )
    parser.add_argument(
        "--hover", type=int, default=None, metavar="AGE",
        help="print each event's stats as of AGE",
    )


def _print_types():
    print(f"{'type':<20} {'priority':>8}  {'timing':<14} impacts")
    print("-" * 70)
    for event_type in DEFAULT_REGISTRY.types():
        handler = DEFAULT_REGISTRY.get(event_type)
        flags = [
            name for name, on in (
                ("immediate", handler.HAS_IMMEDIATE_IMPACT),
                ("ongoing", handler.HAS_ONGOING_IMPACT),
                ("growth", handler.AFFECTS_GROWTH),
                ("context", handler.MODIFIES_CONTEXT),
            ) if on
        ]
        print(f"{event_type:<20} {handler.priority:>8}  {handler.timing:<14} {', '.join(flags)}")


def _print_header(params: SimulationParams, events: list):
    years = params.end_age - params.start_age + 1
    print("=" * 60)
    print(f"Net worth projection (age {params.start_age}-{params.end_age}, {years} years)")
    if params.investment_return is not None:
        print(f"  Fallback investment return: {params.investment_return:g}%")
    for event in sorted(events, key=lambda e: e.age):
        print(f"  age {event.age:>3}: {event.type}")
    print("=" * 60)


def _print_table(results: list[dict], every: int):
    every = max(every, 1)
    print(f"{'age':<6} {'net worth':>16}")
    print("-" * 24)
    last = len(results) - 1
    for i, point in enumerate(results):
        if i % every == 0 or i == last:
            print(f"{point['age']:<6} {point['net_worth']:>16,.2f}")
    print("-" * 24)


def _print_summary(summary: dict):
    print(f"Final net worth (age {summary['final_age']}): {summary['final_net_worth']:,.2f}")
    print(f"Peak net worth (age {summary['peak_age']}): {summary['peak_net_worth']:,.2f}")
    if summary["first_negative_age"] is not None:
        print(f"⚠ Net worth first goes negative at age {summary['first_negative_age']}")


def _print_hover(events: list, age: int):
    print(f"\nEvent stats at age {age}")
    for event in events:
        handler = DEFAULT_REGISTRY.get(event.type)
        if handler is None:
            continue
        print(f"  {event.type} (placed at {event.age})")
        for label, value in handler.get_hover_stats(event, age).items():
            shown = f"{value:,.2f}" if isinstance(value, float) else value
            print(f"    {label}: {shown}")


def main(argv: list[str] | None = None):
    """Run one projection from config/CLI and print the results"""
    try:
        _, params, events, args = parse_args("Net worth projection", _add_cli_args, argv)
    except ValueError as e:
        print(f"invalid scenario: {e}", file=sys.stderr)
        raise SystemExit(1)

    if args.list_types:
        _print_types()
        return

    if not events:
        print("No events in scenario; nothing to project.", file=sys.stderr)
        return

    for warning in validate_events(events, params):
        print(f"warning: {warning}", file=sys.stderr)

    _print_header(params, events)
    results = calculate_projection(events, params)
    _print_table(results, args.every)
    _print_summary(summarize_projection(results))
    if args.hover is not None:
        _print_hover(events, args.hover)


if __name__ == "__main__":
    main()
