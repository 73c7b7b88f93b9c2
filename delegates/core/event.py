"""
Notification slots ("events") built on multicast delegates.

An owner class declares a slot as a class attribute and raises it from its
own methods:

    class Publisher:
        changed = Event(Action[str])

        def set_value(self, value: str) -> None:
            Publisher.changed._emit(self, value)

From outside, ``publisher.changed`` only supports ``+=`` / ``-=`` (or
subscribe / unsubscribe). Assigning, deleting or calling it raises
EventAccessError. Raising is the owner's job: ``Event._emit`` and
``Event._emit_isolated`` are internal to the owner class and the Event
exposes no public raise method. With no subscribers a raise does nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from delegates.core.delegate import (
    Delegate,
    DelegateType,
    InvocationResult,
    Target,
    describe_target,
)
from delegates.errors.errors import EventAccessError

logger = logging.getLogger(__name__)

Handler = Union[Target, Delegate]


class Event:
    """
    Class-level descriptor for a named notification slot.

    Each owner instance keeps its own Delegate in its ``__dict__``; owners
    therefore need a ``__dict__`` (no ``__slots__``-only classes).
    Only the owner raises, through ``Owner.slot._emit(self, ...)``.
    """

    def __init__(self, handler_type: DelegateType, *, doc: Optional[str] = None) -> None:
        self.handler_type = handler_type
        self.name = "<unbound>"
        self.owner_name = "<unbound>"
        self._attr = ""
        if doc:
            self.__doc__ = doc

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.owner_name = owner.__name__
        self._attr = f"_event_{name}"

    @property
    def qualname(self) -> str:
        return f"{self.owner_name}.{self.name}"

    def __repr__(self) -> str:
        return f"<Event {self.qualname}: {self.handler_type.signature()}>"

    # --- descriptor protocol ---

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return EventAccessor(self, instance)

    def __set__(self, instance: Any, value: Any) -> None:
        # `obj.slot += handler` ends by assigning the accessor back; nothing else is allowed
        if isinstance(value, EventAccessor):
            if value._event is self and value._instance is instance:
                return
        raise EventAccessError(
            f"{self.qualname} can only be changed with += or -=", event=self.qualname
        )

    def __delete__(self, instance: Any) -> None:
        raise EventAccessError(f"{self.qualname} cannot be deleted", event=self.qualname)

    # --- subscription ---

    def handlers(self, instance: Any) -> Delegate:
        """Current invocation list of ``instance``'s slot (possibly empty)."""
        current = vars(instance).get(self._attr)
        return current if current is not None else self.handler_type.empty()

    def subscribe(self, instance: Any, handler: Handler) -> None:
        updated = self.handlers(instance) + handler
        vars(instance)[self._attr] = updated
        logger.debug(
            f"{self.qualname}: subscribed {describe_target(handler)} ({len(updated)} total)"
        )

    def unsubscribe(self, instance: Any, handler: Handler) -> None:
        current = self.handlers(instance)
        updated = current - handler
        if updated is current:
            logger.debug(f"{self.qualname}: {describe_target(handler)} was not subscribed")
            return
        vars(instance)[self._attr] = updated
        logger.debug(
            f"{self.qualname}: unsubscribed {describe_target(handler)} ({len(updated)} left)"
        )

    # --- raising (owner only) ---

    def _emit(self, instance: Any, *args: Any) -> Any:
        """
        Invoke every subscriber in registration order.

        Returns the last subscriber's result, or None when nobody subscribed.
        A subscriber exception propagates and later subscribers are skipped.
        """
        handlers = self.handlers(instance)
        if not handlers:
            logger.debug(f"{self.qualname} raised with no subscribers")
            return None
        return handlers.invoke(*args)

    def _emit_isolated(self, instance: Any, *args: Any) -> list[InvocationResult]:
        """Invoke each subscriber separately; failures are collected, not raised."""
        handlers = self.handlers(instance)
        if not handlers:
            logger.debug(f"{self.qualname} raised with no subscribers")
            return []
        return handlers.invoke_isolated(*args)


class EventAccessor:
    """What code outside the owner sees: subscribe and unsubscribe only."""

    __slots__ = ("_event", "_instance")

    def __init__(self, event: Event, instance: Any) -> None:
        self._event = event
        self._instance = instance

    @property
    def handler_type(self) -> DelegateType:
        return self._event.handler_type

    def subscribe(self, handler: Handler) -> None:
        self._event.subscribe(self._instance, handler)

    def unsubscribe(self, handler: Handler) -> None:
        self._event.unsubscribe(self._instance, handler)

    def __iadd__(self, handler: Handler) -> EventAccessor:
        self.subscribe(handler)
        return self

    def __isub__(self, handler: Handler) -> EventAccessor:
        self.unsubscribe(handler)
        return self

    def __len__(self) -> int:
        return len(self._event.handlers(self._instance))

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        raise EventAccessError(
            f"{self._event.qualname} can only be raised by {self._event.owner_name}",
            event=self._event.qualname,
        )

    def __repr__(self) -> str:
        return f"<EventAccessor {self._event.qualname} subscribers={len(self)}>"
