"""Tests for the retry executor: attempt counting, error reporting, hooks and context."""

import asyncio
import time

import pytest
from conftest import AttemptFailed, FlakyOperation, HookFailed, Host, Recorder

from pyrepeater import (
    ResolutionError,
    RetryError,
    RetryOptions,
    RetryPolicy,
    ValidationError,
    delay,
    prop,
    retry,
)

# =============================================================================
# Attempt counting
# =============================================================================


@pytest.mark.asyncio
async def test_succeeds_first_try():
    """An operation that succeeds is called once."""
    op = FlakyOperation(failures=0)
    decorated = retry(3, op)

    assert await decorated(None) == 1
    assert op.calls == 1


@pytest.mark.asyncio
async def test_succeeds_after_failures():
    """Fails twice, third attempt succeeds within a budget of 3."""
    op = FlakyOperation(failures=2)

    assert await retry(3, op)(None) == 3
    assert op.calls == 3


@pytest.mark.asyncio
async def test_stops_after_success():
    """No attempts are made after the first success."""
    op = FlakyOperation(failures=1)

    assert await retry(10, op)(None) == 2
    assert op.calls == 2


@pytest.mark.asyncio
async def test_exhausts_budget():
    """Fails more times than allowed: called exactly budget times, then raises."""
    op = FlakyOperation(failures=5)

    with pytest.raises(AttemptFailed) as exc_info:
        await retry(3, op)(None)

    assert op.calls == 3
    assert exc_info.value.attempt == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("budget", [1, 0, -2])
async def test_budget_of_one_or_less_makes_one_attempt(budget):
    op = FlakyOperation(failures=-1)

    with pytest.raises(AttemptFailed):
        await retry(budget, op)(None)

    assert op.calls == 1


@pytest.mark.asyncio
async def test_synchronous_operation():
    """Plain return values and synchronous raises are normalized."""
    op = FlakyOperation(failures=2, is_async=False)

    assert await retry(3, op)(None) == 3
    assert op.calls == 3


# =============================================================================
# Error reporting
# =============================================================================


@pytest.mark.asyncio
async def test_reports_last_error_by_default():
    op = FlakyOperation(failures=-1)

    with pytest.raises(AttemptFailed) as exc_info:
        await retry(3, op)(None)

    assert exc_info.value.attempt == 3


@pytest.mark.asyncio
async def test_provide_all_errors():
    """Budget 3 failing with 1, 2, 3 reports all three causes in order."""
    op = FlakyOperation(failures=-1)

    with pytest.raises(RetryError) as exc_info:
        await retry(3, op, provide_all_errors=True)(None)

    errors = exc_info.value.errors
    assert [e.attempt for e in errors] == [1, 2, 3]
    assert exc_info.value.last is errors[-1]
    assert exc_info.value.__cause__ is errors[-1]


@pytest.mark.asyncio
async def test_provide_all_errors_single_attempt():
    op = FlakyOperation(failures=-1)

    with pytest.raises(RetryError) as exc_info:
        await retry(1, op, provide_all_errors=True)(None)

    assert len(exc_info.value.errors) == 1


@pytest.mark.asyncio
async def test_provide_all_errors_unused_on_success():
    op = FlakyOperation(failures=2)

    assert await retry(3, op, provide_all_errors=True)(None) == 3


# =============================================================================
# success_predicate
# =============================================================================


@pytest.mark.asyncio
async def test_predicate_false_downgrades_success():
    """Budget 1 with a predicate that always refuses raises with the original value."""
    value = {"status": "degraded"}

    async def op(ctx):
        return value

    with pytest.raises(ValidationError) as exc_info:
        await retry(1, op, success_predicate=lambda ctx, v: False)(None)

    assert exc_info.value.value is value


@pytest.mark.asyncio
async def test_predicate_retries_until_accepted():
    op = FlakyOperation(failures=0)

    result = await retry(5, op, success_predicate=lambda ctx, v: v >= 3)(None)

    assert result == 3
    assert op.calls == 3


@pytest.mark.asyncio
async def test_predicate_exception_is_the_cause():
    class Rejected(Exception):
        pass

    def predicate(ctx, value):
        raise Rejected(value)

    with pytest.raises(Rejected):
        await retry(2, FlakyOperation(), success_predicate=predicate)(None)


@pytest.mark.asyncio
async def test_async_predicate():
    async def predicate(ctx, value):
        await asyncio.sleep(0)
        return value == 2

    op = FlakyOperation()
    assert await retry(3, op, success_predicate=predicate)(None) == 2


@pytest.mark.asyncio
async def test_predicate_not_called_for_failures():
    predicate = Recorder(result=True)
    op = FlakyOperation(failures=2)

    await retry(3, op, success_predicate=predicate)(None)

    assert predicate.count == 1


# =============================================================================
# before_retry
# =============================================================================


@pytest.mark.asyncio
async def test_before_retry_between_attempts():
    """Runs before every retry, never before the first attempt."""
    hook = Recorder()
    op = FlakyOperation(failures=2)

    await retry(5, op, before_retry=hook)(None)

    assert hook.count == 2
    assert [args[1].attempt for args in hook.calls] == [1, 2]


@pytest.mark.asyncio
async def test_before_retry_not_called_on_final_failure():
    hook = Recorder()

    with pytest.raises(AttemptFailed):
        await retry(3, FlakyOperation(failures=-1), before_retry=hook)(None)

    assert hook.count == 2


@pytest.mark.asyncio
async def test_before_retry_failure_before_final_attempt():
    """A hook failure before the last slot becomes the final error."""
    hook = Recorder(fail_on={2})
    op = FlakyOperation(failures=-1)

    with pytest.raises(HookFailed) as exc_info:
        await retry(3, op, before_retry=hook)(None)

    assert exc_info.value.call == 2
    # The hook took the third slot, so the operation ran only twice
    assert op.calls == 2


@pytest.mark.asyncio
async def test_before_retry_failure_consumes_slot():
    """The slot after a hook failure is not an operation call."""
    hook = Recorder(fail_on={1})
    op = FlakyOperation(failures=-1)

    with pytest.raises(RetryError) as exc_info:
        await retry(4, op, before_retry=hook, provide_all_errors=True)(None)

    errors = exc_info.value.errors
    assert len(errors) == 4
    assert isinstance(errors[0], AttemptFailed)
    assert isinstance(errors[1], HookFailed)
    assert [e.attempt for e in errors[2:]] == [2, 3]
    assert op.calls == 3


@pytest.mark.asyncio
async def test_before_retry_receives_hook_failure():
    """After a hook failure the next hook call receives that failure."""
    hook = Recorder(fail_on={1})

    await retry(4, FlakyOperation(failures=1), before_retry=hook)(None)

    assert isinstance(hook.calls[1][1], HookFailed)


@pytest.mark.asyncio
async def test_async_before_retry_is_awaited():
    """The next attempt waits for an asynchronous hook to settle."""
    stamps = []

    async def op(ctx):
        stamps.append(time.monotonic())
        if len(stamps) < 2:
            raise AttemptFailed(len(stamps))
        return "ok"

    await retry(2, op, before_retry=lambda ctx, err: delay(30))(None)

    assert stamps[1] - stamps[0] >= 0.025


# =============================================================================
# Context propagation
# =============================================================================


@pytest.mark.asyncio
async def test_context_propagates_to_operation_and_hooks():
    host = Host()
    op = FlakyOperation(failures=1)
    predicate = Recorder(result=True)
    hook = Recorder()

    await retry(3, op, success_predicate=predicate, before_retry=hook)(host, "a", "b")

    assert op.contexts == [host, host]
    assert op.args == [("a", "b"), ("a", "b")]
    assert hook.calls[0][0] is host
    assert predicate.calls[0][0] is host


@pytest.mark.asyncio
async def test_method_binding():
    """A decorated operation assigned in a class body behaves as a method."""

    class Client:
        max_attempts = 4

        def __init__(self):
            self.calls = 0

        async def _fetch(self, key):
            self.calls += 1
            if self.calls < 4:
                raise AttemptFailed(self.calls)
            return f"{key}:{self.calls}"

        fetch = retry(prop("max_attempts"), _fetch)

    client = Client()
    assert await client.fetch("k") == "k:4"


@pytest.mark.asyncio
async def test_budget_resolver_called_once_per_call():
    host = Host(max_attempts=2)
    resolver = Recorder(result=2)
    op = FlakyOperation(failures=-1)

    with pytest.raises(AttemptFailed):
        await retry(resolver, op)(host)

    assert resolver.calls == [(host,)]
    assert op.calls == 2


@pytest.mark.asyncio
async def test_budget_resolver_evaluated_per_call():
    host = Host(max_attempts=1)
    op = FlakyOperation(failures=-1)
    decorated = retry(prop("max_attempts"), op)

    with pytest.raises(AttemptFailed):
        await decorated(host)
    host.max_attempts = 3
    with pytest.raises(AttemptFailed):
        await decorated(host)

    assert op.calls == 4


@pytest.mark.asyncio
async def test_invalid_budget():
    with pytest.raises(ResolutionError):
        await retry("three", FlakyOperation())(None)


# =============================================================================
# Options and decorator forms
# =============================================================================


@pytest.mark.asyncio
async def test_options_object():
    op = FlakyOperation(failures=-1)
    options = RetryOptions(provide_all_errors=True)

    with pytest.raises(RetryError):
        await retry(2, op, options)(None)


def test_options_and_keywords_conflict():
    with pytest.raises(TypeError):
        retry(2, FlakyOperation(), RetryOptions(), provide_all_errors=True)


@pytest.mark.asyncio
async def test_decorator_syntax():
    calls = []

    @retry(3)
    async def ping(ctx, host):
        calls.append(host)
        if len(calls) < 2:
            raise ConnectionError(host)
        return "pong"

    assert await ping(None, "example.com") == "pong"
    assert calls == ["example.com", "example.com"]
    assert ping.__name__ == "ping"


@pytest.mark.asyncio
async def test_concurrent_calls_have_independent_state():
    """Each call keeps its own attempt counter and error log."""

    async def op(ctx, fail_times):
        ctx["calls"] += 1
        await asyncio.sleep(0)
        if ctx["calls"] <= fail_times:
            raise AttemptFailed(ctx["calls"])
        return ctx["calls"]

    decorated = retry(3, op, provide_all_errors=True)
    first, second = {"calls": 0}, {"calls": 0}

    results = await asyncio.gather(
        decorated(first, 2), decorated(second, 5), return_exceptions=True
    )

    assert results[0] == 3
    assert isinstance(results[1], RetryError)
    assert len(results[1].errors) == 3


@pytest.mark.asyncio
async def test_cancellation_is_not_an_attempt_failure():
    started = asyncio.Event()
    op_calls = []

    async def op(ctx):
        op_calls.append(1)
        started.set()
        await asyncio.sleep(10)

    task = asyncio.ensure_future(retry(5, op)(None))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(op_calls) == 1


# =============================================================================
# RetryPolicy budgets
# =============================================================================


@pytest.mark.asyncio
async def test_retry_policy_budget_and_backoff():
    policy = RetryPolicy(
        max_attempts=3, initial_delay_ms=20, max_delay_ms=100, backoff_multiplier=2.0
    )
    op = FlakyOperation(failures=-1)

    start = time.monotonic()
    with pytest.raises(AttemptFailed):
        await retry(policy, op)(None)
    elapsed = time.monotonic() - start

    assert op.calls == 3
    # 20 ms + 40 ms of backoff
    assert elapsed >= 0.055


@pytest.mark.asyncio
async def test_retry_policy_none_makes_one_attempt():
    op = FlakyOperation(failures=-1)

    with pytest.raises(AttemptFailed):
        await retry(RetryPolicy.NONE, op)(None)

    assert op.calls == 1


def test_retry_policy_standard_delays():
    policy = RetryPolicy.STANDARD

    assert policy.delay_for_attempt(1) == 1000
    assert policy.delay_for_attempt(2) == 2000
    assert policy.delay_for_attempt(3) is None


def test_retry_policy_with_max_attempts():
    policy = RetryPolicy.with_max_attempts(5)

    assert policy.max_attempts == 5
    assert policy.delay_for_attempt(4) == 8000
    assert "max_attempts=5" in repr(policy)
