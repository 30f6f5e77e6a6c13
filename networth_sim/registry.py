"""Handler registry: maps an event type tag to its handler instance."""

from networth_sim.event_types import TYPE_ALIASES
from networth_sim.handlers import ALL_HANDLERS, EventHandler


class HandlerRegistry:
    """Central lookup of event handlers by type tag."""

    def __init__(self):
        self._handlers: dict[str, EventHandler] = {}

    def register(self, event_type: str, handler: EventHandler) -> None:
        """Register handler for event_type, replacing any existing one."""
        self._handlers[event_type] = handler

    def get(self, event_type: str) -> EventHandler | None:
        return self._handlers.get(event_type)

    def types(self) -> list[str]:
        return sorted(self._handlers)

    def clear(self) -> None:
        self._handlers.clear()

    def __contains__(self, event_type: str) -> bool:
        return event_type in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def register_all_events(registry: HandlerRegistry | None = None) -> HandlerRegistry:
    """(Re)populate registry with one handler per supported event type.

    The registry is cleared first, so calling this repeatedly always leaves the
    same mapping. Aliases share the handler instance of their canonical type.
    """
    if registry is None:
        registry = HandlerRegistry()
    registry.clear()
    for handler_cls in ALL_HANDLERS:
        registry.register(handler_cls.TYPE, handler_cls())
    for alias, canonical in TYPE_ALIASES.items():
        registry.register(alias, registry.get(canonical))
    return registry


DEFAULT_REGISTRY = register_all_events()
