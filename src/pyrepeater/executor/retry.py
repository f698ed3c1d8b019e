"""
Retry executor: call an operation until it succeeds or the budget runs out.

Design Pattern: Decorator Pattern
retry() wraps an operation in a coroutine function with the same calling
convention (context first), adding the attempt loop around it.

Per call of the decorated operation:
1. Resolve the attempt budget against the calling context
2. Run an attempt and normalize its result to an Outcome
3. Run the success predicate on a success (once)
4. On failure with slots left: log the cause, back off, run before_retry,
   then start the next attempt
5. On failure with no slots left: raise the last cause, or RetryError
   with every cause

A before_retry hook that fails takes the next attempt's slot: its exception
becomes that slot's cause and the operation is not called for it.

Example:
    ```python
    class Inventory:
        max_attempts = 3

        async def _reserve(self, sku: str) -> Reservation:
            return await self.client.reserve(sku)

        reserve = retry(
            prop("max_attempts"),
            _reserve,
            before_retry=lambda self, err: delay(200),
            success_predicate=lambda self, r: r.confirmed,
        )

    reservation = await Inventory().reserve("SKU-1")
    ```
"""

import asyncio
import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from pyrepeater.core import (
    Fulfilled,
    Outcome,
    Rejected,
    ResolutionError,
    RetryError,
    ValidationError,
    capture,
    invoke,
    resolve,
)
from pyrepeater.models import RetryOptions, RetryPolicy, RetryState

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def retry(
    attempts: Any,
    operation: F | None = None,
    options: RetryOptions | None = None,
    *,
    success_predicate: Callable[[Any, Any], Any] | None = None,
    before_retry: Callable[[Any, BaseException], Any] | None = None,
    provide_all_errors: bool = False,
) -> Any:
    """
    Decorate an operation so each call retries it up to a budget.

    Args:
        attempts: Attempt budget. An int, a RetryPolicy (budget plus backoff
            delays), or a resolver taking the calling context
        operation: Function called as operation(context, *args, **kwargs).
            When omitted, retry() returns a decorator
        options: RetryOptions with hooks; mutually exclusive with the
            keyword hooks below
        success_predicate: See RetryOptions.success_predicate
        before_retry: See RetryOptions.before_retry
        provide_all_errors: See RetryOptions.provide_all_errors

    Returns:
        Coroutine function decorated(context, *args, **kwargs), or a
        decorator producing one

    Raises:
        TypeError: If options and keyword hooks are both given

    Example:
        ```python
        @retry(5, before_retry=lambda ctx, err: delay(100))
        async def ping(ctx, host: str) -> float:
            return await measure(host)

        latency = await ping(None, "example.com")
        ```
    """
    if options is None:
        options = RetryOptions(
            success_predicate=success_predicate,
            before_retry=before_retry,
            provide_all_errors=provide_all_errors,
        )
    elif success_predicate is not None or before_retry is not None or provide_all_errors:
        raise TypeError("Pass either options or keyword hooks to retry(), not both")

    def decorator(f: F) -> F:
        @functools.wraps(f)
        async def wrapper(context: Any, *args: Any, **kwargs: Any) -> Any:
            policy, budget = _resolve_budget(attempts, context)
            state = RetryState(budget=budget)
            return await _run(f, options, policy, state, context, args, kwargs)

        return wrapper  # type: ignore

    # Support both retry(n, op) and @retry(n) syntax
    if operation is not None:
        return decorator(operation)
    return decorator


async def _run(
    operation: Callable[..., Any],
    options: RetryOptions,
    policy: RetryPolicy | None,
    state: RetryState,
    context: Any,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> Any:
    """Attempt loop for one invocation."""
    name = getattr(operation, "__name__", repr(operation))
    outcome = await _attempt(operation, options, state, context, args, kwargs)

    while isinstance(outcome, Rejected):
        state.record_failure(outcome.error)
        if state.exhausted:
            break

        logger.debug(
            f"[{state.invocation_id}] {name}: attempt {state.attempt}/{state.budget} "
            f"failed: {outcome.error!r}"
        )

        if policy is not None:
            delay_ms = policy.delay_for_attempt(state.attempt)
            if delay_ms:
                await asyncio.sleep(delay_ms / 1000.0)

        if options.before_retry is not None:
            hook = await capture(invoke(options.before_retry, context, outcome.error))
            if isinstance(hook, Rejected):
                # The hook failure takes the next slot in place of the operation
                state.attempt += 1
                logger.debug(
                    f"[{state.invocation_id}] {name}: before_retry failed: {hook.error!r}"
                )
                outcome = hook
                continue

        outcome = await _attempt(operation, options, state, context, args, kwargs)

    if isinstance(outcome, Fulfilled):
        if state.attempt > 1:
            logger.debug(
                f"[{state.invocation_id}] {name}: succeeded on attempt {state.attempt}"
            )
        return outcome.value

    logger.warning(
        f"[{state.invocation_id}] {name}: all {state.budget} attempts failed; "
        f"last error: {state.errors[-1]!r}"
    )
    if options.provide_all_errors:
        raise RetryError(state.errors) from state.errors[-1]
    raise state.errors[-1]


async def _attempt(
    operation: Callable[..., Any],
    options: RetryOptions,
    state: RetryState,
    context: Any,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> Outcome:
    """Run one attempt and apply the success predicate."""
    state.attempt += 1
    outcome = await capture(invoke(operation, context, *args, **kwargs))
    if isinstance(outcome, Fulfilled) and not state.validated:
        outcome = await _validate(options, state, context, outcome.value)
    return outcome


async def _validate(options: RetryOptions, state: RetryState, context: Any, value: Any) -> Outcome:
    """Turn a success into a failure if the success predicate rejects it."""
    if options.success_predicate is not None:
        verdict = await capture(invoke(options.success_predicate, context, value))
        if isinstance(verdict, Rejected):
            return verdict
        if not verdict.value:
            return Rejected(ValidationError(value))

    state.validated = True
    return Fulfilled(value)


def _resolve_budget(attempts: Any, context: Any) -> tuple[RetryPolicy | None, int]:
    """Resolve the attempt budget, returning the policy if one was given."""
    resolved = resolve(attempts, context)

    policy = None
    if isinstance(resolved, RetryPolicy):
        policy = resolved
        resolved = policy.max_attempts

    if isinstance(resolved, bool) or not isinstance(resolved, int):
        raise ResolutionError(f"Attempt budget must resolve to an int, got {resolved!r}")

    return policy, resolved
