"""
Timeout guard: race an operation against a deadline.

The guard only applies a deadline when there is something to preempt:

    operation raises synchronously  -> the decorated call raises synchronously
    operation returns a plain value -> the value is returned unmodified
    operation returns a Task        -> an asyncio.Task racing it against a timer

When the timer wins, the race fails with OperationTimeoutError and the
operation is cancelled best-effort; the guard does not wait for the
cancellation to be observed. When the operation wins, its outcome passes
through unchanged and the timer is cancelled.

Example:
    ```python
    guarded = timeout(250, lambda ctx, url: client.get(url))
    try:
        response = await guarded(None, "https://example.com")
    except OperationTimeoutError as e:
        print(e.error_name, e.duration_ms)
    ```

Timeouts compose with retry: the guarded call is the attempt.

    ```python
    fetch = retry(3, timeout(1000, fetch_once))
    ```
"""

import asyncio
import functools
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pyrepeater.core import OperationTimeoutError, ResolutionError, call, is_task, resolve

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def timeout(duration: Any, operation: F | None = None) -> Any:
    """
    Decorate an operation so its Task is raced against a deadline.

    Args:
        duration: Deadline in milliseconds, or a resolver taking the
            calling context
        operation: Function called as operation(context, *args, **kwargs).
            When omitted, timeout() returns a decorator

    Returns:
        Plain function decorated(context, *args, **kwargs) returning
        whatever the operation returned, or an asyncio.Task for the race
        when the operation returned a Task

    Raises:
        RuntimeError: (from the decorated call) if the operation returned a
            Task while no event loop is running
    """

    def decorator(f: F) -> F:
        name = getattr(f, "__name__", repr(f))

        @functools.wraps(f)
        def wrapper(context: Any, *args: Any, **kwargs: Any) -> Any:
            duration_ms = _resolve_duration(duration, context)
            result = call(f, context, *args, **kwargs)
            if not is_task(result):
                return result

            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                if inspect.iscoroutine(result):
                    result.close()
                raise
            return loop.create_task(_race(result, duration_ms, name))

        return wrapper  # type: ignore

    # Support both timeout(ms, op) and @timeout(ms) syntax
    if operation is not None:
        return decorator(operation)
    return decorator


async def _race(awaitable: Awaitable[Any], duration_ms: float, name: str) -> Any:
    """Settle with the operation's outcome, or fail once the deadline passes."""
    task = asyncio.ensure_future(awaitable)
    try:
        # asyncio.wait cancels its timer as soon as the task finishes
        done, _ = await asyncio.wait({task}, timeout=duration_ms / 1000.0)
    except asyncio.CancelledError:
        _cancel_quietly(task, awaitable)
        raise

    if task in done:
        return task.result()

    logger.warning(f"{name}: timed out after {duration_ms} ms")
    _cancel_quietly(task, awaitable)
    raise OperationTimeoutError(duration_ms)


def _cancel_quietly(task: "asyncio.Future[Any]", awaitable: Awaitable[Any]) -> None:
    """Request cancellation of the operation without waiting for it.

    Used both when the deadline passes and when the race itself is cancelled.
    """
    task.add_done_callback(_discard_result)

    targets = [task]
    if awaitable is not task:
        targets.append(awaitable)

    for target in targets:
        cancel = getattr(target, "cancel", None)
        if not callable(cancel):
            continue
        try:
            cancel()
        except Exception as e:
            logger.debug(f"Ignoring failure while cancelling timed-out operation: {e!r}")


def _discard_result(task: "asyncio.Future[Any]") -> None:
    # Mark a late failure as retrieved so asyncio does not report it
    if not task.cancelled():
        task.exception()


def _resolve_duration(duration: Any, context: Any) -> float:
    resolved = resolve(duration, context)
    if isinstance(resolved, bool) or not isinstance(resolved, (int, float)):
        raise ResolutionError(f"Timeout duration must resolve to a number, got {resolved!r}")
    return resolved
