"""
Callable references with a fixed signature and multicast invocation.

A DelegateType describes a signature: parameter types and a return type.
Calling the type with a target (a function, a closure, a lambda or a bound
method) produces a Delegate, an immutable and ordered invocation list.

    MathOperation = DelegateType("MathOperation", (int, int), int)
    op = MathOperation(add) + multiply
    op(2, 3)  # runs add, then multiply; returns 6

Combining and removing always build a new Delegate, so a delegate being
invoked is never changed underneath the loop.
"""

from __future__ import annotations

import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from delegates.errors.errors import (
    DelegateSignatureError,
    DelegateTypeMismatchError,
    EmptyDelegateError,
)

logger = logging.getLogger(__name__)

Target = Callable[..., Any]


def describe_target(target: Any) -> str:
    """Readable name for a target; bound methods report ``Class.method``."""
    func = getattr(target, "__func__", target)
    name = getattr(func, "__qualname__", None) or getattr(func, "__name__", None)
    return name if name else repr(target)


def type_name(tp: Any) -> str:
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, type):
        return tp.__name__
    return str(tp).replace("typing.", "")


def _is_checkable(tp: Any) -> bool:
    # only plain classes can be used with isinstance; typing constructs are skipped
    return isinstance(tp, type) and tp is not type(None)


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of one member during isolated invocation."""

    target: str
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DelegateType:
    """
    A named callable signature.

    - Calling the type wraps a target into a single-target Delegate.
    - Targets are checked for arity when wrapped.
    - With ``strict`` set, argument types (and plain-class return types) are
      checked with isinstance on every invocation.
    """

    def __init__(
        self,
        name: str,
        params: Sequence[Any] = (),
        returns: Any = None,
        *,
        strict: bool = False,
    ) -> None:
        self.name = name
        self.params: tuple[Any, ...] = tuple(params)
        self.returns = None if returns is type(None) else returns
        self.strict = strict
        self._strict_twin: Optional[DelegateType] = None

    @property
    def arity(self) -> int:
        return len(self.params)

    def signature(self) -> str:
        params = ", ".join(type_name(p) for p in self.params)
        return f"{self.name}({params}) -> {type_name(self.returns)}"

    def __repr__(self) -> str:
        flag = " strict" if self.strict else ""
        return f"<DelegateType {self.signature()}{flag}>"

    # --- construction ---

    def __call__(self, target: Union[Target, "Delegate"]) -> "Delegate":
        if isinstance(target, Delegate):
            if target.delegate_type is not self:
                raise DelegateTypeMismatchError(
                    f"Cannot convert {target.delegate_type.name} to {self.name}",
                    left=self.name,
                    right=target.delegate_type.name,
                )
            return target
        self.check_target(target)
        return Delegate(self, (target,))

    def empty(self) -> "Delegate":
        """A delegate of this type with no targets."""
        return Delegate(self, ())

    def as_strict(self) -> "DelegateType":
        """
        The strict twin of this type (created once and reused).
        The twin is a distinct type: its delegates do not combine with ours.
        """
        if self.strict:
            return self
        if self._strict_twin is None:
            self._strict_twin = DelegateType(self.name, self.params, self.returns, strict=True)
        return self._strict_twin

    # --- checks ---

    def accepts(self, target: Any) -> bool:
        """True when ``target`` is callable with exactly ``arity`` positional arguments."""
        if not callable(target):
            return False
        try:
            sig = inspect.signature(target)
        except (TypeError, ValueError):
            # builtins without an introspectable signature are taken on trust
            return True
        try:
            sig.bind(*([None] * self.arity))
        except TypeError:
            return False
        return True

    def check_target(self, target: Any) -> None:
        if not self.accepts(target):
            raise DelegateSignatureError(
                f"{describe_target(target)} does not match {self.signature()}",
                delegate_type=self.name,
                target=describe_target(target),
            )

    def check_args(self, args: tuple[Any, ...]) -> None:
        if len(args) != self.arity:
            raise DelegateSignatureError(
                f"{self.name} expects {self.arity} argument(s), got {len(args)}",
                delegate_type=self.name,
            )
        if not self.strict:
            return
        for index, (value, expected) in enumerate(zip(args, self.params)):
            if _is_checkable(expected) and not isinstance(value, expected):
                raise DelegateSignatureError(
                    (
                        f"{self.name} argument {index} must be {type_name(expected)}, "
                        f"got {type(value).__name__}"
                    ),
                    delegate_type=self.name,
                    details={"position": index},
                )

    def check_result(self, value: Any, target: Target) -> None:
        if not self.strict or not _is_checkable(self.returns):
            return
        if not isinstance(value, self.returns):
            raise DelegateSignatureError(
                (
                    f"{describe_target(target)} returned {type(value).__name__}, "
                    f"{self.name} requires {type_name(self.returns)}"
                ),
                delegate_type=self.name,
                target=describe_target(target),
            )


def delegate_type(
    stub: Optional[Callable[..., Any]] = None, *, strict: bool = False
) -> Any:
    """
    Declare a DelegateType from an annotated stub function.

        @delegate_type
        def MathOperation(x: int, y: int) -> int:
            ...

    Parameter annotations become the parameter types; a missing annotation
    means Any. The stub body is never called.
    """

    def build(fn: Callable[..., Any]) -> DelegateType:
        hints = typing.get_type_hints(fn)
        params = [hints.get(p, Any) for p in inspect.signature(fn).parameters]
        dtype = DelegateType(fn.__name__, params, hints.get("return"), strict=strict)
        dtype.__doc__ = fn.__doc__
        return dtype

    if stub is None:
        return build
    return build(stub)


class Delegate:
    """
    Immutable, ordered invocation list of targets sharing one DelegateType.

    - ``a + b`` appends b's targets; ``a - b`` removes the last occurrence of b's targets.
    - ``d(*args)`` runs every target in order and returns the last result only;
      an exception stops the call.
    - ``invocation_list()`` / ``invoke_isolated()`` run members one by one.
    """

    __slots__ = ("_type", "_targets")

    def __init__(self, delegate_type: DelegateType, targets: Iterable[Target] = ()) -> None:
        self._type = delegate_type
        self._targets: tuple[Target, ...] = tuple(targets)

    @property
    def delegate_type(self) -> DelegateType:
        return self._type

    @property
    def targets(self) -> tuple[Target, ...]:
        return self._targets

    @property
    def name(self) -> str:
        if len(self._targets) == 1:
            return describe_target(self._targets[0])
        return f"{self._type.name}[{len(self._targets)}]"

    def __len__(self) -> int:
        return len(self._targets)

    def __bool__(self) -> bool:
        return bool(self._targets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Delegate):
            return NotImplemented
        return self._type is other._type and self._targets == other._targets

    def __hash__(self) -> int:
        return hash((id(self._type), self._targets))

    def __repr__(self) -> str:
        names = ", ".join(describe_target(t) for t in self._targets)
        return f"<Delegate {self._type.name} [{names}]>"

    # --- combination ---

    def _same_type(self, other: Delegate) -> Delegate:
        if other._type is not self._type:
            raise DelegateTypeMismatchError(
                f"Delegates must be of the same type: {self._type.name} vs {other._type.name}",
                left=self._type.name,
                right=other._type.name,
            )
        return other

    def combine(self, other: Union[Target, Delegate]) -> Delegate:
        """Return a new delegate with ``other``'s targets appended."""
        if isinstance(other, Delegate):
            other = self._same_type(other)
        else:
            other = self._type(other)
        if not other:
            return self
        if not self:
            return other
        return Delegate(self._type, self._targets + other._targets)

    def __add__(self, other: Union[Target, Delegate]) -> Delegate:
        return self.combine(other)

    def __radd__(self, other: Target) -> Delegate:
        return self._type(other).combine(self)

    def remove(self, other: Union[Target, Delegate]) -> Delegate:
        """
        Return a new delegate without the last contiguous occurrence of
        ``other``'s targets. Unknown targets leave the delegate unchanged.
        """
        if isinstance(other, Delegate):
            needle = self._same_type(other)._targets
        else:
            needle = (other,)
        if not needle:
            return self
        size = len(needle)
        for start in range(len(self._targets) - size, -1, -1):
            if self._targets[start : start + size] == needle:
                return Delegate(self._type, self._targets[:start] + self._targets[start + size :])
        return self

    def __sub__(self, other: Union[Target, Delegate]) -> Delegate:
        return self.remove(other)

    # --- invocation ---

    def invoke(self, *args: Any) -> Any:
        """
        Call every target in registration order with ``args``.
        Returns the last target's result; earlier results are discarded.
        """
        if not self._targets:
            raise EmptyDelegateError(
                f"{self._type.name} has no targets to invoke", component="delegate"
            )
        self._type.check_args(args)
        result: Any = None
        for target in self._targets:
            result = target(*args)
            self._type.check_result(result, target)
        return result

    def __call__(self, *args: Any) -> Any:
        return self.invoke(*args)

    def invocation_list(self) -> tuple[Delegate, ...]:
        """Snapshot of single-target delegates, one per registered target."""
        return tuple(Delegate(self._type, (target,)) for target in self._targets)

    def invoke_isolated(self, *args: Any) -> list[InvocationResult]:
        """
        Invoke each member separately; a failing member is recorded and the
        remaining members still run.
        """
        self._type.check_args(args)
        results: list[InvocationResult] = []
        for member in self.invocation_list():
            try:
                value = member.invoke(*args)
            except Exception as e:
                logger.warning(f"{member.name} failed in isolated {self._type.name} call: {e}")
                results.append(InvocationResult(target=member.name, error=e))
            else:
                results.append(InvocationResult(target=member.name, value=value))
        return results
