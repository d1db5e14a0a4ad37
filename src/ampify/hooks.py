"""Named filter chains.

A filter event holds an ordered set of callbacks; ``apply_filters`` threads
a value through them. Ordering uses the priority ``Registry`` from Python
Markdown, so higher priorities run first and equal priorities run in
registration order.
"""

from collections.abc import Callable

from markdown.util import Registry

DEFAULT_PRIORITY = 10


class FilterChain:
    """Event name -> prioritized callbacks."""

    def __init__(self):
        self._events: dict[str, Registry] = {}

    def add_filter(
        self,
        event: str,
        name: str,
        callback: Callable,
        priority: float = DEFAULT_PRIORITY,
    ) -> None:
        """Register a callback. Re-adding an existing name replaces it."""
        registry = self._events.setdefault(event, Registry())
        registry.register(callback, name, priority)

    def remove_filter(self, event: str, name: str) -> bool:
        """Remove a callback. Returns False if it was not registered."""
        registry = self._events.get(event)
        if registry is None or name not in registry:
            return False
        registry.deregister(name)
        if not len(registry):
            del self._events[event]
        return True

    def has_filter(self, event: str, name: str | None = None) -> bool:
        registry = self._events.get(event)
        if registry is None:
            return False
        if name is None:
            return len(registry) > 0
        return name in registry

    def apply_filters(self, event: str, value, *args):
        """Pass ``value`` through every callback registered for ``event``."""
        registry = self._events.get(event)
        if registry is None:
            return value
        # Snapshot so callbacks may unregister themselves
        for callback in list(registry):
            value = callback(value, *args)
        return value
