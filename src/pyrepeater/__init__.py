"""
pyrepeater: asynchronous retry, timeout and resumable-sequence combinators.

Design Pattern: Façade Pattern
This module gathers the combinators, their configuration and their error
types behind one import.

Example:
    ```python
    import asyncio
    from pyrepeater import delay, resumable, retry, timeout

    class Mirror:
        def __init__(self, client):
            self.client = client

        async def fetch_index(self, url):
            return await self.client.get(url)

        async def download(self, index):
            return await self.client.download_all(index)

    async def main():
        mirror = Mirror(client)
        fetch = retry(
            3,
            timeout(2000, Mirror.fetch_index),
            before_retry=lambda ctx, err: delay(500),
        )
        sync = resumable(mirror, [fetch, Mirror.download], initial_arg="https://example.com/index")

        try:
            await sync()
        except Exception:
            await sync()  # resumes at the step that failed

    asyncio.run(main())
    ```
"""

# Core types
from pyrepeater.core import (
    TIMEOUT_ERROR_NAME,
    Fulfilled,
    OperationTimeoutError,
    Outcome,
    Rejected,
    RepeaterError,
    ResolutionError,
    Resolver,
    RetryError,
    SequenceBusyError,
    SequenceStatus,
    ValidationError,
    Value,
    capture,
    delay,
    invoke,
    prop,
    resolve,
)

# Configuration and state
from pyrepeater.models import (
    RetryOptions,
    RetryPolicy,
    RetryState,
    SequenceOptions,
    SequenceState,
)

# Combinators
from pyrepeater.executor import ResumableSequence, resumable, retry, timeout, workflow

__version__ = "0.1.0"

__all__ = [
    # Combinators
    "retry",
    "timeout",
    "resumable",
    "ResumableSequence",
    "workflow",
    # Helpers
    "delay",
    "prop",
    "resolve",
    "invoke",
    "capture",
    "Value",
    "Resolver",
    # Outcomes
    "Fulfilled",
    "Rejected",
    "Outcome",
    # Configuration and state
    "RetryPolicy",
    "RetryOptions",
    "SequenceOptions",
    "RetryState",
    "SequenceState",
    "SequenceStatus",
    # Errors
    "TIMEOUT_ERROR_NAME",
    "RepeaterError",
    "ValidationError",
    "RetryError",
    "OperationTimeoutError",
    "SequenceBusyError",
    "ResolutionError",
    # Metadata
    "__version__",
]
