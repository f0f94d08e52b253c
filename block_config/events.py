import logging
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


@runtime_checkable
class EventSink(Protocol):
    """The two primitives the configuration core needs from an event bus."""

    def register(self, event_name: str, callback: Listener, **options: Any) -> None:
        ...

    def fire(self, event_name: str, *args: Any) -> None:
        ...


@dataclass(order=True)
class _Registration:
    sort_key: tuple[int, int]
    callback: Listener = field(compare=False)
    name: str | None = field(compare=False, default=None)


class EventBus:
    """
    Simple synchronous event bus.

    Options accepted by ``register``:

    priority
        Listeners with a higher priority run first; equal priorities run in
        registration order.
    name
        Registering a second listener with the same name for the same event
        replaces the first one.

    Listeners run inline in ``fire``; an exception raised by a listener
    propagates to whoever fired the event and stops the remaining listeners.
    """

    def __init__(self) -> None:
        self.listeners: dict[str, list[_Registration]] = {}
        self._counter = count()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("EventBus(...)")
        else:
            with p.group(4, "EventBus(", ")"):
                for event_name, registrations in self.listeners.items():
                    p.breakable()
                    p.text(f"{event_name}={len(registrations)},")
                p.breakable()

    def register(
        self,
        event_name: str,
        callback: Listener,
        priority: int = 0,
        name: str | None = None,
    ) -> None:
        registrations = self.listeners.setdefault(event_name, [])
        if name is not None:
            self.unregister(event_name, name)
        registrations.append(
            _Registration((-priority, next(self._counter)), callback, name)
        )
        registrations.sort()

    def unregister(self, event_name: str, name: str) -> bool:
        registrations = self.listeners.get(event_name, [])
        kept = [r for r in registrations if r.name != name]
        removed = len(kept) != len(registrations)
        registrations[:] = kept
        return removed

    def has_listeners(self, event_name: str) -> bool:
        return bool(self.listeners.get(event_name))

    def fire(self, event_name: str, *args: Any) -> None:
        registrations = list(self.listeners.get(event_name, []))
        if registrations:
            logger.debug(
                "Firing %s to %d listener(s)", event_name, len(registrations)
            )
        for registration in registrations:
            registration.callback(*args)
