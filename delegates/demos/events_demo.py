"""
Events walkthrough.

EventsDemo publishes two slots: ``notify`` with a custom handler type and
``standard_notify`` with the standard (sender, args) shape. Subscribers
attach with += and detach with -=; only EventsDemo raises.
"""

from __future__ import annotations

import logging
from typing import Optional, TextIO

from delegates.adapters.telemetry.memory import NullTelemetry
from delegates.core.delegate import delegate_type
from delegates.core.event import Event
from delegates.core.generics import EventArgs, EventHandler
from delegates.ports.telemetry import Telemetry

logger = logging.getLogger(__name__)


@delegate_type
def NotifyEventHandler(message: str) -> None:
    """Receives the message passed to EventsDemo.raise_notify."""


class EventsDemo:
    """Publisher with one custom and one standard event."""

    notify = Event(NotifyEventHandler, doc="Raised with a message by raise_notify().")
    standard_notify = Event(EventHandler[EventArgs], doc="Raised by raise_standard_notify().")

    def raise_notify(self, message: str) -> None:
        # _emit() checks for subscribers first, so an empty slot is a no-op
        EventsDemo.notify._emit(self, message)

    def raise_standard_notify(self) -> None:
        EventsDemo.standard_notify._emit(self, self, EventArgs.EMPTY)


def run_events_demo(out: TextIO, *, telemetry: Optional[Telemetry] = None) -> None:
    telemetry = telemetry or NullTelemetry()

    def step(section: str) -> None:
        logger.debug(f"events demo: {section}")
        telemetry.log("demo_step", demo="events", section=section)

    def on_notify_received(message: str) -> None:
        print(f"Named handler received: {message}", file=out)

    demo = EventsDemo()

    step("subscribe")
    demo.notify += on_notify_received
    demo.notify += lambda msg: print(f"Lambda received: {msg}", file=out)
    demo.standard_notify += lambda sender, args: print("StandardNotify event triggered.", file=out)

    step("raise")
    demo.raise_notify("Hello from custom event!")
    demo.raise_standard_notify()

    step("unsubscribe")
    demo.notify -= on_notify_received
    demo.raise_notify("Only the lambda is left")

    step("no_subscribers")
    quiet = EventsDemo()
    quiet.raise_notify("Nobody is listening")
    print(f"Raised with {len(quiet.notify)} subscribers: nothing happened", file=out)
