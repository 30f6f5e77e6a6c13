"""Timeline events and the caller-side event list."""

import uuid
from dataclasses import dataclass, field

from networth_sim.event_types import apply_field_rules, default_params
from networth_sim.params import SimulationParams


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Event:
    """A user-placed financial occurrence at a given age."""

    type: str
    age: int
    params: dict[str, float | str | None] = field(default_factory=dict)
    id: str = field(default_factory=_new_id)


@dataclass
class EventTimeline:
    """Editable list of events for one scenario.

    Events are kept in insertion order; that order is what the engine uses to
    break priority ties and regime placement ties.
    """

    events: list[Event] = field(default_factory=list)

    def add_event(
        self, event_type: str, age: int, params: dict | None = None,
        *, use_defaults: bool = True,
    ) -> Event:
        """Place a new event. Type defaults are filled in under the given params.

        Given params go through the linked-field rules, so an explicit
        annualIncome also replaces the default monthlyIncome.
        """
        merged = default_params(event_type) if use_defaults else {}
        for name, value in (params or {}).items():
            merged.update(apply_field_rules(name, value))
        event = Event(type=event_type, age=int(age), params=merged)
        self.events.append(event)
        return event

    def get_event(self, event_id: str) -> Event:
        for event in self.events:
            if event.id == event_id:
                return event
        raise KeyError(event_id)

    def update_event(
        self, event_id: str, *, age: int | None = None, params: dict | None = None,
    ) -> Event:
        """Move and/or edit an event in place. Param edits are merged, not replaced."""
        event = self.get_event(event_id)
        if age is not None:
            event.age = int(age)
        for name, value in (params or {}).items():
            event.params.update(apply_field_rules(name, value))
        return event

    def remove_event(self, event_id: str) -> Event:
        event = self.get_event(event_id)
        self.events.remove(event)
        return event

    def reset(self) -> None:
        self.events.clear()

    def project(self, params: SimulationParams, registry=None) -> list[dict]:
        """Run the projection over the current events. Empty timeline → []."""
        from networth_sim.simulation import calculate_projection

        if not self.events:
            return []
        return calculate_projection(self.events, params, registry=registry)
