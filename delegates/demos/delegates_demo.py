"""
Delegates walkthrough.

Sections, in output order:
    1. custom delegate type, called directly and through invoke()
    2. multicast: Action[str] and a custom LogOperation built with +=
    3. isolated invocation of each member, then a combined call that aborts
    4. generic families: Func, Action, Predicate (lambda and inline-def forms)
    5. lambda, method reference and anonymous (inline def) targets
    6. multicast return value: only the last target's result comes back

All output goes to the stream passed in; nothing writes to sys.stdout directly.
"""

from __future__ import annotations

import logging
from typing import Optional, TextIO

from delegates.adapters.telemetry.memory import NullTelemetry
from delegates.core.delegate import Delegate, DelegateType, delegate_type
from delegates.core.generics import Action, Func, Predicate
from delegates.ports.telemetry import Telemetry

logger = logging.getLogger(__name__)


@delegate_type
def MathOperation(x: int, y: int) -> int:
    """Two integers in, one integer out."""


@delegate_type
def LogOperation(message: str) -> None:
    """Consumes a message."""


def add(x: int, y: int) -> int:
    return x + y


def multiply(x: int, y: int) -> int:
    return x * y


class SinkUnavailable(RuntimeError):
    """Raised by the deliberately broken sink in the isolation section."""


class ConsoleLog:
    """Message sinks bound to one output stream; the bound methods are delegate targets."""

    def __init__(self, out: TextIO) -> None:
        self._out = out

    def log_message(self, message: str) -> None:
        print(f"Log: {message}", file=self._out)

    def warn_message(self, message: str) -> None:
        print(f"Warning: {message}", file=self._out)

    def unavailable(self, message: str) -> None:
        raise SinkUnavailable("audit sink unavailable")

    def line(self, text: str = "") -> None:
        print(text, file=self._out)


def run_delegates_demo(
    out: TextIO, *, strict: bool = False, telemetry: Optional[Telemetry] = None
) -> None:
    telemetry = telemetry or NullTelemetry()
    console = ConsoleLog(out)

    def typed(dtype: DelegateType) -> DelegateType:
        return dtype.as_strict() if strict else dtype

    def step(section: str) -> None:
        logger.debug(f"delegates demo: {section}")
        telemetry.log("demo_step", demo="delegates", section=section, strict=strict)

    math_operation = typed(MathOperation)
    log_operation = typed(LogOperation)

    # 1. Custom delegate type wrapping a module-level function
    step("custom_delegate")
    add_operation = math_operation(add)
    console.line(f"Custom delegate: {add_operation(2, 3)}")

    # Explicit construction; calling and invoke() are the same operation
    new_add_operation = Delegate(math_operation, [add])
    console.line(f"Custom delegate via invoke: {new_add_operation.invoke(2, 3)}")

    # 2. Multicast: each += builds a new, longer invocation list
    step("multicast")
    message_delegate = typed(Action[str])(console.log_message)
    message_delegate += console.warn_message
    message_delegate("Multicast delegate example")

    log_message_delegate = log_operation(console.log_message)
    log_message_delegate += console.warn_message
    log_message_delegate("Log and Warn using LogOperation delegate")

    # 3. Members one at a time: a failing member does not stop the others
    step("isolated_invocation")
    console.line()
    console.line("Isolated invocation of each LogOperation member:")
    guarded = log_operation(console.log_message) + console.unavailable + console.warn_message
    for member in guarded.invocation_list():
        try:
            member("Invoked individually via invocation_list")
        except Exception as e:
            console.line(f"Error invoking delegate: {e}")

    # The same members as one combined call: the failure ends the call
    step("combined_failure")
    try:
        guarded("Invoked as one combined call")
    except SinkUnavailable as e:
        console.line(f"Combined call aborted: {e}")

    # 4. Generic families
    step("generic_func")
    multiply_operation = typed(Func[int, int, int])(lambda x, y: x * y)
    console.line(f"Func delegate: {multiply_operation(3, 4)}")

    def func_delegate(x: int, y: int) -> int:
        # inline def standing in for an anonymous method
        return x + y

    console.line(f"Func anonymous delegate: {typed(Func[int, int, int])(func_delegate)(3, 4)}")

    step("generic_action")
    greeting = "Hello"
    # the lambda captures `greeting` and `console` from this scope
    greet_action = typed(Action[str])(lambda name: console.line(f"{greeting}, {name}!"))
    greet_action("World")

    def log_action_target(message: str) -> None:
        console.line(f"Action delegate log: {message}")

    log_action = typed(Action[str])(log_action_target)
    log_action("This is a log message using Action delegate")

    step("generic_predicate")
    is_even_predicate = typed(Predicate[int])(lambda number: number % 2 == 0)
    console.line(f"Predicate delegate: {is_even_predicate(10)}")

    def is_positive(number: int) -> bool:
        return number > 0

    console.line(f"Predicate delegate for positive check: {typed(Predicate[int])(is_positive)(5)}")

    # 5. Lambda, method reference, inline def
    step("lambda")
    subtract_operation = math_operation(lambda x, y: x - y)
    console.line(f"Lambda delegate: {subtract_operation(5, 2)}")

    step("method_reference")
    multiply_method_operation = math_operation(multiply)
    console.line(f"Method reference delegate: {multiply_method_operation(6, 7)}")

    step("anonymous")

    def divide(x: int, y: int) -> int:
        return x // y

    anonymous_operation = math_operation(divide)
    console.line(f"Anonymous delegate: {anonymous_operation(10, 2)}")

    # 6. Trailing result: add runs first, its 5 is discarded
    step("multicast_return")
    combined: Delegate = math_operation(add) + multiply
    console.line(f"Multicast return value: {combined(2, 3)}")

