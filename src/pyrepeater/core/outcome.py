"""
Settled task outcomes.

This module defines the two terminal states of a Task: Fulfilled and
Rejected. A Task in pyrepeater is any awaitable; once it settles, capture()
records how it settled so the combinators can branch on the result without
nesting try/except blocks around every await.

Example:
    ```python
    outcome = await capture(invoke(operation, context))

    match outcome:
        case Fulfilled(value):
            print(f"Operation returned: {value}")
        case Rejected(error):
            print(f"Operation failed: {error!r}")
    ```
"""

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

__all__ = [
    "Fulfilled",
    "Rejected",
    "Outcome",
    "capture",
    "is_fulfilled",
    "is_rejected",
]

T = TypeVar("T")


@dataclass(frozen=True)
class Fulfilled(Generic[T]):
    """
    The task settled successfully.

    Attributes:
        value: The value the task produced (may be None)
    """

    value: T

    def unwrap(self) -> T:
        """Return the settled value."""
        return self.value

    def __repr__(self) -> str:
        return f"Fulfilled({self.value!r})"


@dataclass(frozen=True)
class Rejected:
    """
    The task settled with a failure.

    Attributes:
        error: The exception the task raised
    """

    error: BaseException

    def unwrap(self) -> Any:
        """Re-raise the failure."""
        raise self.error

    def __repr__(self) -> str:
        return f"Rejected({self.error!r})"


Outcome = Fulfilled[Any] | Rejected
"""Either terminal state of a task."""


async def capture(task: Awaitable[T]) -> Outcome:
    """
    Await a task and record how it settled.

    Only Exception subclasses are captured. Cancellation and other
    BaseExceptions propagate so that an outer abort is never mistaken for an
    attempt failure.

    Args:
        task: Any awaitable

    Returns:
        Fulfilled with the value, or Rejected with the raised exception
    """
    try:
        value = await task
    except Exception as e:
        return Rejected(e)
    return Fulfilled(value)


def is_fulfilled(outcome: Outcome) -> bool:
    """Check whether an outcome is a success."""
    return isinstance(outcome, Fulfilled)


def is_rejected(outcome: Outcome) -> bool:
    """Check whether an outcome is a failure."""
    return isinstance(outcome, Rejected)
