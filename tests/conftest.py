"""
Shared test helpers for pyrepeater tests.

Provides call-counting operations that fail a controlled number of times,
plus a host object used to check context propagation.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from hypothesis import strategies as st


class AttemptFailed(Exception):
    """Failure raised by FlakyOperation, tagged with the call number."""

    def __init__(self, attempt: int):
        super().__init__(f"attempt {attempt} failed")
        self.attempt = attempt


@dataclass
class FlakyOperation:
    """Operation that fails `failures` times, then returns its call number.

    Set failures to -1 to fail forever.
    """

    failures: int = 0
    is_async: bool = True
    calls: int = 0
    contexts: list[Any] = field(default_factory=list)
    args: list[tuple[Any, ...]] = field(default_factory=list)

    def __call__(self, context: Any, *args: Any) -> Any:
        self.calls += 1
        self.contexts.append(context)
        self.args.append(args)
        if self.is_async:
            return self._settle()
        return self._outcome()

    async def _settle(self) -> int:
        await asyncio.sleep(0)
        return self._outcome()

    def _outcome(self) -> int:
        if self.failures < 0 or self.calls <= self.failures:
            raise AttemptFailed(self.calls)
        return self.calls


@dataclass
class Recorder:
    """Hook that records every call and optionally fails on given calls."""

    fail_on: set[int] = field(default_factory=set)
    result: Any = None
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    def __call__(self, *args: Any) -> Any:
        self.calls.append(args)
        if len(self.calls) in self.fail_on:
            raise HookFailed(len(self.calls))
        return self.result

    @property
    def count(self) -> int:
        return len(self.calls)


class HookFailed(Exception):
    def __init__(self, call: int):
        super().__init__(f"hook call {call} failed")
        self.call = call


@dataclass
class Host:
    """Object the decorated operations are bound to."""

    max_attempts: int = 3
    timeout_ms: float = 1000


# Hypothesis strategies for property-based testing

budgets = st.integers(min_value=1, max_value=8)
failure_counts = st.integers(min_value=0, max_value=10)
