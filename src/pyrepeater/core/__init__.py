"""
Core types for pyrepeater.

This module contains the substrate shared by every combinator:
- Outcome: Fulfilled / Rejected terminal states of a Task
- invoke / delay: Task normalization and timed Tasks
- Value / Resolver: values computed from the calling context
- SequenceStatus: lifecycle of a resumable sequence
- Errors raised by the combinators themselves
"""

from pyrepeater.core.errors import (
    TIMEOUT_ERROR_NAME,
    OperationTimeoutError,
    RepeaterError,
    ResolutionError,
    RetryError,
    SequenceBusyError,
    ValidationError,
)
from pyrepeater.core.outcome import (
    Fulfilled,
    Outcome,
    Rejected,
    capture,
    is_fulfilled,
    is_rejected,
)
from pyrepeater.core.resolvable import (
    MAX_RESOLVE_DEPTH,
    Resolvable,
    Resolver,
    Value,
    prop,
    resolve,
)
from pyrepeater.core.status import SequenceStatus
from pyrepeater.core.task import call, delay, invoke, is_task

__all__ = [
    "TIMEOUT_ERROR_NAME",
    "RepeaterError",
    "ValidationError",
    "RetryError",
    "OperationTimeoutError",
    "SequenceBusyError",
    "ResolutionError",
    "Fulfilled",
    "Rejected",
    "Outcome",
    "capture",
    "is_fulfilled",
    "is_rejected",
    "MAX_RESOLVE_DEPTH",
    "Value",
    "Resolver",
    "Resolvable",
    "resolve",
    "prop",
    "SequenceStatus",
    "call",
    "delay",
    "invoke",
    "is_task",
]
