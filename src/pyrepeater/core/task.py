"""Task normalization for operations and hooks.

An operation handed to a combinator may return a plain value, return an
awaitable, or raise synchronously. invoke() folds all three into one
coroutine so the combinators only ever deal with awaitables:

    - plain value      -> coroutine that returns it
    - awaitable        -> coroutine that awaits it
    - synchronous raise -> coroutine that raises it when awaited

Every operation and hook receives the calling context as its first
positional argument, the way a method receives self.
"""

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

__all__ = ["invoke", "call", "is_task", "delay"]


def is_task(value: Any) -> bool:
    """Check whether a value is a Task (anything that can be awaited)."""
    return inspect.isawaitable(value)


def call(func: Callable[..., Any], context: Any, *args: Any, **kwargs: Any) -> Any:
    """Call func with the context threaded in as its first argument.

    Exists so every combinator binds context the same way; exceptions
    propagate synchronously.
    """
    return func(context, *args, **kwargs)


async def invoke(func: Callable[..., Any], context: Any, *args: Any, **kwargs: Any) -> Any:
    """
    Call func with context and normalize the result to a Task.

    Nothing runs until the returned coroutine is awaited, so a synchronous
    raise surfaces at the await site exactly like a rejected awaitable.

    Args:
        func: Operation or hook to call
        context: Calling context passed as the first argument
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        The value func produced, awaited if it was a Task
    """
    result = call(func, context, *args, **kwargs)
    if is_task(result):
        return await result
    return result


async def delay(ms: float, func: Callable[[], Any] | None = None) -> Any:
    """
    Settle after an interval, optionally chaining into func.

    Useful as a before_retry hook to space out attempts:

        ```python
        fetch = retry(5, fetch_once, before_retry=lambda ctx, err: delay(250))
        ```

    Args:
        ms: Interval in milliseconds
        func: Optional zero-argument callable run after the interval; its
            result (awaited if it is a Task) becomes the Task's value

    Returns:
        None, or the result of func
    """
    await asyncio.sleep(ms / 1000.0)
    if func is None:
        return None
    result = func()
    if is_task(result):
        return await result
    return result
