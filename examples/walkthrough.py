#!/usr/bin/env python3
"""
Delegates and Events - End-to-End Walkthrough

Runs both demos to stdout, then builds a small publisher of its own to show
the pieces working together outside the packaged demos.

Usage:
    python examples/walkthrough.py
"""

from __future__ import annotations

import sys

from delegates import Action, Event, EventAccessError, Func
from delegates.demos.delegates_demo import run_delegates_demo
from delegates.demos.events_demo import run_events_demo


class Thermometer:
    """Publishes a reading whenever it changes."""

    reading_changed = Event(Action[float])

    def __init__(self) -> None:
        self._reading = 0.0

    def update(self, value: float) -> None:
        if value != self._reading:
            self._reading = value
            Thermometer.reading_changed._emit(self, value)


def main() -> None:
    print("=" * 60)
    print("DELEGATES")
    print("=" * 60)
    run_delegates_demo(sys.stdout)

    print()
    print("=" * 60)
    print("EVENTS")
    print("=" * 60)
    run_events_demo(sys.stdout)

    print()
    print("=" * 60)
    print("CUSTOM PUBLISHER")
    print("=" * 60)
    to_fahrenheit = Func[float, float](lambda c: c * 9 / 5 + 32)
    thermometer = Thermometer()
    thermometer.reading_changed += lambda c: print(f"  {c:.1f} C")
    thermometer.reading_changed += lambda c: print(f"  {to_fahrenheit(c):.1f} F")
    for value in (21.5, 21.5, 23.0):
        thermometer.update(value)

    try:
        thermometer.reading_changed(99.0)
    except EventAccessError as e:
        print(f"  refused: {e}")


if __name__ == "__main__":
    main()
