"""Exception types raised by the repeater combinators.

Operation, hook and step failures are propagated as whatever the user code
raised. The classes here cover the failures the combinators create themselves:
a rejected success predicate, an exhausted attempt budget with all errors
requested, an expired deadline, an overlapping sequence invocation and a
resolver that never settles.
"""

from typing import Any

__all__ = [
    "TIMEOUT_ERROR_NAME",
    "RepeaterError",
    "ValidationError",
    "RetryError",
    "OperationTimeoutError",
    "SequenceBusyError",
    "ResolutionError",
]

TIMEOUT_ERROR_NAME = "RepeaterTimeoutError"
"""Fixed kind carried by every OperationTimeoutError."""


class RepeaterError(Exception):
    """Base class for errors created by pyrepeater itself."""

    pass


class ValidationError(RepeaterError):
    """A nominally successful result was rejected by a success predicate.

    The predicate returned a falsy value, so the original result is carried
    as the failure cause instead of being returned to the caller.

    Attributes:
        value: The result the operation produced
    """

    def __init__(self, value: Any):
        super().__init__(f"Result rejected by success predicate: {value!r}")
        self.value = value

    def __repr__(self) -> str:
        return f"ValidationError(value={self.value!r})"


class RetryError(RepeaterError):
    """All attempts failed and every failure cause was requested.

    Raised only when provide_all_errors is set; otherwise the last cause is
    raised unchanged.

    Example:
        ```python
        try:
            await fetch(None)
        except RetryError as e:
            for attempt, cause in enumerate(e.errors, start=1):
                print(f"attempt {attempt}: {cause!r}")
        ```

    Attributes:
        errors: Failure causes in attempt order, one per attempt
    """

    def __init__(self, errors: list[BaseException]):
        self.errors = list(errors)
        super().__init__(f"All {len(self.errors)} attempts failed; last error: {self.last!r}")

    @property
    def last(self) -> BaseException | None:
        """The cause of the final attempt."""
        return self.errors[-1] if self.errors else None

    def __repr__(self) -> str:
        return f"RetryError(errors={self.errors!r})"


class OperationTimeoutError(RepeaterError, TimeoutError):
    """The deadline elapsed before the guarded operation settled.

    Inherits from the built-in TimeoutError so generic handlers still catch it.

    Attributes:
        duration_ms: The deadline that was exceeded, in milliseconds
        error_name: Always TIMEOUT_ERROR_NAME
    """

    error_name = TIMEOUT_ERROR_NAME

    def __init__(self, duration_ms: float):
        self.duration_ms = duration_ms
        super().__init__(f"Operation timed out after {duration_ms} ms")


class SequenceBusyError(RepeaterError):
    """A resumable sequence was invoked while a previous invocation is in flight."""

    pass


class ResolutionError(RepeaterError):
    """A resolvable value could not be turned into a usable result."""

    pass
