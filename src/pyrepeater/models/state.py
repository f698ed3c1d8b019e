"""State records owned by retry invocations and resumable sequences.

RetryState lives for exactly one call of a retry-decorated operation.
SequenceState lives as long as the ResumableSequence that owns it and is
what lets a later invocation resume where the previous one failed.
"""

from dataclasses import dataclass, field
from typing import Any

from uuid_extensions import uuid7

from pyrepeater.core.status import SequenceStatus


@dataclass
class RetryState:
    """Per-invocation bookkeeping for the retry executor.

    Design: Value Object
        Created fresh on every call, so concurrent calls of the same
        decorated operation never share counters or error logs.
    """

    budget: int
    """Resolved attempt budget for this invocation."""

    attempt: int = 0
    """Number of attempts started so far."""

    errors: list[BaseException] = field(default_factory=list)
    """Failure causes in attempt order (the error log)."""

    validated: bool = False
    """True once a result has passed the success predicate."""

    invocation_id: str = field(default_factory=lambda: str(uuid7()))
    """Identifier used to correlate log lines of one invocation."""

    @property
    def exhausted(self) -> bool:
        """True when no attempt slots remain."""
        return self.attempt >= self.budget

    def record_failure(self, error: BaseException) -> None:
        """Append a failure cause to the error log."""
        self.errors.append(error)


@dataclass
class SequenceState:
    """Progress of a resumable sequence across invocations.

    Invariant: last_result is the input of the step at progress. Before any
    step has run that is the initial argument; after a failure it is the
    exact input that failed; once progress reaches the step count it is the
    final output.
    """

    last_result: Any = None
    """Input for the step at progress (or the final output)."""

    progress: int = 0
    """Index of the next step to execute."""

    status: SequenceStatus = SequenceStatus.PENDING
    """Lifecycle status."""

    in_flight: bool = False
    """True while an invocation is running."""

    sequence_id: str = field(default_factory=lambda: str(uuid7()))
    """Identifier used to correlate log lines of one sequence."""
