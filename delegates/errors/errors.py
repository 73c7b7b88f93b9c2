"""
Exceptions raised by the delegate and event layer.

Exception hierarchy:
- DelegateError (base)
  - DelegateSignatureError: target or arguments do not fit the delegate signature
  - DelegateTypeMismatchError: combining delegates of different types
  - EmptyDelegateError: invoking a delegate that holds no targets
  - EventAccessError: mutating or raising an event from outside its owner
  - ConfigurationError: invalid demo configuration

Exceptions raised by subscribers are never wrapped; they propagate as-is.
"""

from __future__ import annotations

from typing import Any, Optional


class DelegateError(Exception):
    """Base exception for all delegate and event errors."""

    def __init__(
        self,
        message: str,
        *,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.component = component
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.component:
            parts.append(f"[component={self.component}]")
        if self.details:
            parts.append(f"[details={self.details}]")
        return " ".join(parts)


class DelegateSignatureError(DelegateError):
    """Raised when a target or an argument list does not match a delegate type."""

    def __init__(
        self,
        message: str,
        *,
        delegate_type: Optional[str] = None,
        target: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.delegate_type = delegate_type
        self.target = target
        details = details or {}
        if delegate_type:
            details["delegate_type"] = delegate_type
        if target:
            details["target"] = target
        super().__init__(message, component=component, details=details)


class DelegateTypeMismatchError(DelegateError):
    """Raised when two delegates of different types are combined or removed."""

    def __init__(
        self,
        message: str,
        *,
        left: Optional[str] = None,
        right: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.left = left
        self.right = right
        details = details or {}
        if left:
            details["left"] = left
        if right:
            details["right"] = right
        super().__init__(message, component=component, details=details)


class EmptyDelegateError(DelegateError):
    """Raised when a delegate with an empty invocation list is invoked."""


class EventAccessError(DelegateError):
    """Raised when code outside the owner replaces, clears or raises an event."""

    def __init__(
        self,
        message: str,
        *,
        event: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.event = event
        details = details or {}
        if event:
            details["event"] = event
        super().__init__(message, component=component, details=details)


class ConfigurationError(DelegateError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field = field
        self.value = value
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, component=component, details=details)
