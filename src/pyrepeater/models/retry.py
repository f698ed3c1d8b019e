"""
Retry configuration for the retry executor.

Design Pattern: Strategy Pattern
RetryPolicy encapsulates backoff behavior and RetryOptions encapsulates the
per-attempt hooks, so the executor loop never changes when callers want a
different retry strategy.

Design Rationale:
- Safe default: a bare integer budget retries immediately with no delay
- Simple retry: RetryPolicy.with_max_attempts(3) with standard backoff
- Advanced control: a custom RetryPolicy plus RetryOptions hooks
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget plus exponential backoff between attempts.

    Passing a RetryPolicy to retry() in place of an integer budget makes the
    executor sleep delay_for_attempt(k) milliseconds after the k-th failed
    attempt, before running before_retry and the next attempt.

    Examples:
        # Simple: just specify max attempts (uses standard delays)
        policy = RetryPolicy.with_max_attempts(3)

        # Named policy: predefined sensible defaults
        policy = RetryPolicy.STANDARD

        # Custom policy: full control
        policy = RetryPolicy(
            max_attempts=5,
            initial_delay_ms=1000,
            max_delay_ms=30000,
            backoff_multiplier=2.0
        )
    """

    max_attempts: int
    """Maximum number of attempts (including the first try).

    For example, max_attempts = 3 means:
    - Attempt 1: immediate (first try)
    - Attempt 2: after initial_delay
    - Attempt 3: after initial_delay * backoff_multiplier
    """

    initial_delay_ms: int
    """Delay before the first retry in milliseconds."""

    max_delay_ms: int
    """Maximum delay between retries in milliseconds (caps exponential backoff)."""

    backoff_multiplier: float
    """Multiplier for exponential backoff.

    Each retry delay is calculated as:
    min(initial_delay * backoff_multiplier^(attempt-1), max_delay)
    """

    # =========================================================================
    # Predefined Policies
    # =========================================================================

    if TYPE_CHECKING:
        NONE: RetryPolicy
        STANDARD: RetryPolicy
        AGGRESSIVE: RetryPolicy
    else:
        # Set after class definition
        NONE = cast("RetryPolicy", None)
        STANDARD = cast("RetryPolicy", None)
        AGGRESSIVE = cast("RetryPolicy", None)

    @classmethod
    def with_max_attempts(cls, max_attempts: int) -> RetryPolicy:
        """
        Create a policy with custom max_attempts (uses standard delays).

        Args:
            max_attempts: Maximum number of attempts

        Returns:
            RetryPolicy with standard delays

        Example:
            policy = RetryPolicy.with_max_attempts(5)
        """
        return cls(
            max_attempts=max_attempts,
            initial_delay_ms=1000,
            max_delay_ms=30000,
            backoff_multiplier=2.0,
        )

    def delay_for_attempt(self, attempt: int) -> int | None:
        """
        Calculate the delay before the next retry attempt.

        Uses exponential backoff: initial_delay * backoff_multiplier^(attempt-1)
        capped at max_delay.

        Args:
            attempt: The attempt that just failed (1-indexed)

        Returns:
            Delay in milliseconds before the next retry, or None if no more retries.

        Example:
            policy = RetryPolicy.STANDARD
            delay1 = policy.delay_for_attempt(1)  # Returns 1000 (1s)
            delay2 = policy.delay_for_attempt(2)  # Returns 2000 (2s)
            delay3 = policy.delay_for_attempt(3)  # Returns None (max attempts)
        """
        if attempt >= self.max_attempts:
            return None

        # attempt=1 (first retry): multiplier^0 = 1 → initial_delay
        exponent = attempt - 1
        delay_ms = self.initial_delay_ms * self.backoff_multiplier**exponent

        return int(min(delay_ms, self.max_delay_ms))

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(max_attempts={self.max_attempts}, "
            f"initial_delay_ms={self.initial_delay_ms}, "
            f"max_delay_ms={self.max_delay_ms}, "
            f"backoff_multiplier={self.backoff_multiplier})"
        )


RetryPolicy.NONE = RetryPolicy(
    max_attempts=1, initial_delay_ms=0, max_delay_ms=0, backoff_multiplier=1.0
)

RetryPolicy.STANDARD = RetryPolicy(
    max_attempts=3,
    initial_delay_ms=1000,  # 1 second
    max_delay_ms=30000,  # 30 seconds
    backoff_multiplier=2.0,
)

RetryPolicy.AGGRESSIVE = RetryPolicy(
    max_attempts=10,
    initial_delay_ms=100,  # 100 milliseconds
    max_delay_ms=10000,  # 10 seconds
    backoff_multiplier=1.5,
)


# =============================================================================
# RetryOptions - Per-attempt hooks
# =============================================================================


@dataclass(frozen=True)
class RetryOptions:
    """
    Optional hooks and reporting mode for retry().

    Every hook receives the calling context as its first argument.

    Example:
        options = RetryOptions(
            success_predicate=lambda ctx, response: response.status == 200,
            before_retry=lambda ctx, err: delay(100),
            provide_all_errors=True,
        )
        fetch = retry(3, fetch_once, options)
    """

    success_predicate: Callable[[Any, Any], bool] | None = None
    """Decides whether a returned value really is a success.

    Returning a falsy value or raising turns the success into a failure.
    """

    before_retry: Callable[[Any, BaseException], Any] | None = None
    """Runs before every retry (never before the first attempt).

    May return a Task, which is awaited before the next attempt. If it fails,
    its exception is the cause for that retry slot.
    """

    provide_all_errors: bool = False
    """Raise RetryError with every cause instead of just the last cause."""
