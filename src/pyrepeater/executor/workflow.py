"""Declarative retry workflow.

Packages setup, the retried attempt, validation and outcome handling as one
flat set of keyword arguments. Everything is composed from retry(); this
module adds no retry semantics of its own.

Example:
    ```python
    upload = workflow(
        max_attempts=4,
        before=lambda ctx, path: ctx.open_session(path),
        attempt=lambda ctx, session: session.upload(),
        validate=check_upload_receipt,
        before_retry=lambda ctx, err: delay(500),
        on_error=lambda ctx, err: ctx.mark_failed(err),
        lastly=lambda ctx: ctx.close_session(),
    )
    await upload(uploader, "/data/report.csv")
    ```
"""

import functools
from collections.abc import Callable
from typing import Any

from pyrepeater.core import Rejected, capture, invoke
from pyrepeater.executor.retry import retry


def workflow(
    *,
    max_attempts: Any,
    attempt: Callable[..., Any],
    before: Callable[..., Any] | None = None,
    validate: Callable[[Any, Any], Any] | None = None,
    on_success: Callable[[Any, Any], Any] | None = None,
    on_error: Callable[[Any, BaseException], Any] | None = None,
    lastly: Callable[[Any], Any] | None = None,
    before_retry: Callable[[Any, BaseException], Any] | None = None,
    provide_all_errors: bool = False,
) -> Callable[..., Any]:
    """
    Build a coroutine function run(context, *args, **kwargs).

    Args:
        max_attempts: Attempt budget for attempt (int, RetryPolicy or resolver)
        attempt: Operation to retry, called as attempt(context, *args)
        before: Runs once before the first attempt with the call's
            arguments; its result becomes the attempt's only argument
        validate: Runs after each successful attempt; raising marks the
            attempt as failed. The attempt's value passes through unchanged
        on_success: Maps the final value; its result is returned
        on_error: Handles the final failure (including a failing before);
            its result is returned instead of raising
        lastly: Runs after success or failure
        before_retry: Passed through to retry()
        provide_all_errors: Passed through to retry()

    Returns:
        Coroutine function run(context, *args, **kwargs)
    """
    if validate is not None:

        @functools.wraps(attempt)
        async def checked(context: Any, *args: Any, **kwargs: Any) -> Any:
            value = await invoke(attempt, context, *args, **kwargs)
            await invoke(validate, context, value)
            return value

        operation = checked
    else:
        operation = attempt

    decorated = retry(
        max_attempts,
        operation,
        before_retry=before_retry,
        provide_all_errors=provide_all_errors,
    )

    async def prepare_and_attempt(context: Any, args: tuple, kwargs: dict) -> Any:
        if before is None:
            return await decorated(context, *args, **kwargs)
        prepared = await invoke(before, context, *args, **kwargs)
        return await decorated(context, prepared)

    async def run(context: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            outcome = await capture(prepare_and_attempt(context, args, kwargs))
            if isinstance(outcome, Rejected):
                if on_error is None:
                    raise outcome.error
                return await invoke(on_error, context, outcome.error)
            if on_success is None:
                return outcome.value
            return await invoke(on_success, context, outcome.value)
        finally:
            if lastly is not None:
                await invoke(lastly, context)

    return run
