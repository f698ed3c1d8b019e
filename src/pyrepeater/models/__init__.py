"""Data models for the combinators.

Defines configuration (RetryPolicy, RetryOptions, SequenceOptions) and the
state records owned by retry invocations and resumable sequences.

Design: Plain dataclasses
These types carry no behavior beyond small derived properties, keeping the
executor modules the only place where control flow lives.
"""

from pyrepeater.models.retry import RetryOptions, RetryPolicy
from pyrepeater.models.sequence import SequenceOptions
from pyrepeater.models.state import RetryState, SequenceState

__all__ = [
    "RetryPolicy",
    "RetryOptions",
    "SequenceOptions",
    "RetryState",
    "SequenceState",
]
