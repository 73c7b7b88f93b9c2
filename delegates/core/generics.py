"""
Built-in generic delegate families.

    Func[int, int, int]    (int, int) -> int; the last type argument is the return type
    Action[str]            (str) -> None; Action[()] takes no arguments
    Predicate[int]         (int) -> bool
    EventHandler[EventArgs] (sender, EventArgs) -> None

Parametrised types are created once and reused, so two ``Func[int, int, int]``
delegates combine freely. A custom DelegateType with the same shape is still
a different type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from delegates.core.delegate import DelegateType, type_name

Shape = tuple[tuple[Any, ...], Any]


class GenericDelegate:
    """A family of DelegateTypes parametrised by subscription."""

    def __init__(self, name: str, shape: Callable[[tuple[Any, ...]], Shape]) -> None:
        self.name = name
        self._shape = shape
        self._cache: dict[tuple[Any, ...], DelegateType] = {}

    def __getitem__(self, item: Any) -> DelegateType:
        args = item if isinstance(item, tuple) else (item,)
        dtype = self._cache.get(args)
        if dtype is None:
            params, returns = self._shape(args)
            label = ", ".join(type_name(a) for a in args)
            dtype = DelegateType(f"{self.name}[{label}]", params, returns)
            self._cache[args] = dtype
        return dtype

    def __repr__(self) -> str:
        return f"<GenericDelegate {self.name}>"


def _func_shape(args: tuple[Any, ...]) -> Shape:
    if not args:
        raise TypeError("Func requires at least a return type")
    return args[:-1], args[-1]


def _action_shape(args: tuple[Any, ...]) -> Shape:
    return args, None


def _predicate_shape(args: tuple[Any, ...]) -> Shape:
    if len(args) != 1:
        raise TypeError(f"Predicate takes exactly one type argument, got {len(args)}")
    return args, bool


def _event_handler_shape(args: tuple[Any, ...]) -> Shape:
    if len(args) != 1:
        raise TypeError(f"EventHandler takes exactly one type argument, got {len(args)}")
    return (object, args[0]), None


Func = GenericDelegate("Func", _func_shape)
Action = GenericDelegate("Action", _action_shape)
Predicate = GenericDelegate("Predicate", _predicate_shape)
EventHandler = GenericDelegate("EventHandler", _event_handler_shape)


@dataclass(frozen=True)
class EventArgs:
    """Base payload for standard (sender, args) events."""

    EMPTY: ClassVar["EventArgs"]


EventArgs.EMPTY = EventArgs()
