"""
Executor module - the control-flow combinators.

This module contains:
- retry: call an operation until it succeeds or the budget runs out
- timeout: race an operation's Task against a deadline
- resumable: step pipeline that resumes where it last failed
- workflow: declarative before/attempt/validate/outcome wrapper over retry
"""

from pyrepeater.executor.resumable import ResumableSequence, resumable
from pyrepeater.executor.retry import retry
from pyrepeater.executor.timeout import timeout
from pyrepeater.executor.workflow import workflow

__all__ = [
    "retry",
    "timeout",
    "resumable",
    "ResumableSequence",
    "workflow",
]
