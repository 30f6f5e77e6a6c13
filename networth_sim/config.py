"""TOML scenario loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from pathlib import Path
from typing import Callable

from networth_sim.events import Event, EventTimeline
from networth_sim.params import DEFAULT_END_AGE, DEFAULT_START_AGE, SimulationParams

DEFAULT_CONFIG_PATH = Path("config.toml")

DEFAULTS = {
    "start_age": DEFAULT_START_AGE,
    "end_age": DEFAULT_END_AGE,
    "investment_return": None,
    "type_defaults": True,
}

# Keys as the timeline UI names them → config keys
_LEGACY_KEYS = {
    "startAge": "start_age",
    "endAge": "end_age",
    "investmentReturn": "investment_return",
}

_EVENT_KEYS = {"type", "age", "params", "id"}


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"failed to read config file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    for legacy, key in _LEGACY_KEYS.items():
        if legacy in raw:
            v = raw.pop(legacy)
            raw.setdefault(key, v)
    # Normalize events: params may be given inline next to type/age
    if "events" in raw:
        events = []
        for item in raw["events"]:
            item = dict(item)
            params = dict(item.pop("params", {}))
            for key in list(item):
                if key not in _EVENT_KEYS:
                    params[key] = item.pop(key)
            item["params"] = params
            events.append(item)
        raw["events"] = events
    return raw


def parse_events(raw_events: list[dict], type_defaults: bool = True) -> list[Event]:
    """Build events from normalized config tables, in file order."""
    timeline = EventTimeline()
    for i, item in enumerate(raw_events, start=1):
        if "type" not in item or "age" not in item:
            raise ValueError(f"event #{i} needs both 'type' and 'age'")
        age = item["age"]
        if isinstance(age, bool) or not isinstance(age, (int, float)) or int(age) != age:
            raise ValueError(f"event #{i} ({item['type']}): age must be an integer, got {age!r}")
        event = timeline.add_event(
            str(item["type"]), int(age), item.get("params", {}), use_defaults=type_defaults,
        )
        if "id" in item:
            event.id = str(item["id"])
    return timeline.events


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared simulation flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="scenario file (default: config.toml)")
    parser.add_argument("--start-age", type=int, default=None, help=f"first simulated age (default: {d['start_age']})")
    parser.add_argument("--end-age", type=int, default=None, help=f"last simulated age, inclusive (default: {d['end_age']})")
    parser.add_argument("--investment-return", type=float, default=None, help="fallback annual return in %% for phases without their own (default: none)")
    parser.add_argument("--no-type-defaults", dest="type_defaults", action="store_false", default=None, help="don't fill missing event params with type defaults")
    return parser


def build_params(r: dict) -> SimulationParams:
    """Build SimulationParams from resolved config dict."""
    start_age = int(r["start_age"])
    end_age = int(r["end_age"])
    if start_age > end_age:
        raise ValueError(f"start age {start_age} is after end age {end_age}")
    investment_return = r["investment_return"]
    return SimulationParams(
        start_age=start_age,
        end_age=end_age,
        investment_return=None if investment_return is None else float(investment_return),
    )


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
    argv: list[str] | None = None,
) -> tuple[dict, SimulationParams, list[Event], argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_dict, params, events, namespace).
    namespace: raw argparse.Namespace (for extra CLI args added via add_args_fn).
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args(argv)
    config = load_config(args.config)
    r = resolve(args, config)
    params = build_params(r)
    events = parse_events(config.get("events", []), type_defaults=r["type_defaults"])
    return r, params, events, args
