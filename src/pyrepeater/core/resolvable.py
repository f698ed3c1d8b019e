"""
Values that are either given directly or computed from the calling context.

Attempt budgets and timeout durations can be fixed numbers or resolvers:
callables that take the calling context and return the value, or another
resolvable. resolve() unwraps them iteratively until it reaches a plain
value, with a depth guard so a resolver that keeps returning resolvers
fails loudly instead of looping forever.

Example:
    ```python
    class Client:
        max_attempts = 4
        fetch = retry(prop("max_attempts"), fetch_once)
    ```
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pyrepeater.core.errors import ResolutionError

__all__ = [
    "MAX_RESOLVE_DEPTH",
    "Value",
    "Resolver",
    "Resolvable",
    "resolve",
    "prop",
]

T = TypeVar("T")

MAX_RESOLVE_DEPTH = 32
"""Maximum number of resolver calls before giving up."""


@dataclass(frozen=True)
class Value(Generic[T]):
    """A resolvable that is already a concrete value."""

    value: T


@dataclass(frozen=True)
class Resolver:
    """A resolvable computed from the calling context.

    Attributes:
        func: Callable taking the context and returning a resolvable
    """

    func: Callable[[Any], Any]

    def __call__(self, context: Any) -> Any:
        return self.func(context)


Resolvable = Value[Any] | Resolver
"""Tagged form of a value-or-resolver."""


def _tag(value: Any) -> Resolvable:
    if isinstance(value, (Value, Resolver)):
        return value
    if callable(value):
        return Resolver(value)
    return Value(value)


def resolve(value: Any, context: Any = None) -> Any:
    """
    Resolve a value-or-resolver against the calling context.

    Plain callables are treated as resolvers and plain values as concrete
    values, so callers can pass either without wrapping.

    Args:
        value: A plain value, callable, Value or Resolver
        context: Calling context handed to each resolver

    Returns:
        The first non-resolver result

    Raises:
        ResolutionError: If resolution does not settle within MAX_RESOLVE_DEPTH calls
    """
    current = _tag(value)
    for _ in range(MAX_RESOLVE_DEPTH):
        if isinstance(current, Value):
            return current.value
        current = _tag(current(context))
    if isinstance(current, Value):
        return current.value
    raise ResolutionError(f"Value did not resolve within {MAX_RESOLVE_DEPTH} resolver calls")


def prop(name: str) -> Resolver:
    """
    Build a resolver that reads an attribute from the calling context.

    Args:
        name: Attribute name on the context object

    Returns:
        Resolver returning getattr(context, name)

    Example:
        ```python
        class Poller:
            timeout_ms = 500
            poll = timeout(prop("timeout_ms"), poll_once)
        ```
    """

    def _get(context: Any) -> Any:
        return getattr(context, name)

    return Resolver(_get)
