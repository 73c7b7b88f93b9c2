from delegates.core.delegate import (
    Delegate,
    DelegateType,
    InvocationResult,
    delegate_type,
    describe_target,
)
from delegates.core.event import Event, EventAccessor
from delegates.core.generics import (
    Action,
    EventArgs,
    EventHandler,
    Func,
    GenericDelegate,
    Predicate,
)
from delegates.errors.errors import (
    ConfigurationError,
    DelegateError,
    DelegateSignatureError,
    DelegateTypeMismatchError,
    EmptyDelegateError,
    EventAccessError,
)

__all__ = [
    "Action",
    "ConfigurationError",
    "Delegate",
    "DelegateError",
    "DelegateSignatureError",
    "DelegateType",
    "DelegateTypeMismatchError",
    "EmptyDelegateError",
    "Event",
    "EventAccessError",
    "EventAccessor",
    "EventArgs",
    "EventHandler",
    "Func",
    "GenericDelegate",
    "InvocationResult",
    "Predicate",
    "delegate_type",
    "describe_target",
]
