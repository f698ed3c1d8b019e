"""
Status enum for resumable sequence tracking.

The default status represents the initial state, so a freshly built
sequence needs no extra setup.
"""

from enum import Enum


class SequenceStatus(Enum):
    """
    Status of a resumable sequence.

    Lifecycle:
    PENDING → RUNNING → FAILED → RUNNING → ... → COMPLETE

    A FAILED sequence resumes at the failed step on its next invocation.
    A COMPLETE sequence returns its stored result without running any step.
    """

    PENDING = "PENDING"
    """No invocation has run yet."""

    RUNNING = "RUNNING"
    """An invocation is in flight."""

    FAILED = "FAILED"
    """The last invocation stopped at a failing step."""

    COMPLETE = "COMPLETE"
    """Every step has succeeded."""

    @property
    def is_complete(self) -> bool:
        """Check if this status represents completion."""
        return self == SequenceStatus.COMPLETE

    @property
    def is_running(self) -> bool:
        """Check if an invocation is in flight."""
        return self == SequenceStatus.RUNNING

    def __str__(self) -> str:
        return self.value
