"""
Resumable sequence: a step pipeline that resumes where it last failed.

Each step receives the previous step's output (the first step receives the
configured initial argument). The sequence remembers which step is in
flight and the exact input it was given, so when a step fails the next
invocation retries that step with that input instead of starting over.

Timeline of one invocation:
    for each remaining step:
        record (progress = index, last_result = input)   # step in flight
        run step(context, input)
        on failure -> on_error(context, error), re-raise, state unchanged
    record (progress = len(steps), last_result = output)  # complete

A completed sequence returns its stored result on every later invocation
without running any step.

Concurrency:
The progress record is shared by every invocation of one sequence, so
invocations must not overlap. A call made while another is in flight
raises SequenceBusyError without touching the record.

Example:
    ```python
    sync = resumable(
        client,
        [fetch_manifest, download_files, verify_checksums],
        on_error=lambda ctx, err: ctx.log.warning(f"sync stopped: {err!r}"),
        initial_arg="https://example.com/manifest.json",
    )

    while not sync.is_complete:
        try:
            await sync()
        except OSError:
            await asyncio.sleep(5)
    ```
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from pyrepeater.core import (
    Rejected,
    SequenceBusyError,
    SequenceStatus,
    capture,
    invoke,
)
from pyrepeater.models import SequenceOptions, SequenceState

logger = logging.getLogger(__name__)


class ResumableSequence:
    """Ordered steps sharing one progress record across invocations.

    Call the instance (await sequence()) to run the remaining steps. Build
    instances with resumable().

    Design: Single Responsibility
        Owns the progress record and the step loop only. Retrying and
        deadlines belong to the steps themselves (a step may be a retry()
        or timeout() decorated operation).
    """

    def __init__(
        self,
        context: Any,
        steps: Sequence[Callable[..., Any]],
        options: SequenceOptions | None = None,
    ):
        """Initialize a sequence positioned before its first step.

        Args:
            context: Calling context passed as the first argument to every
                step and to on_error
            steps: Functions called as step(context, value)
            options: Optional on_error hook and initial argument
        """
        self._context = context
        self._steps = tuple(steps)
        self._options = options if options is not None else SequenceOptions()
        self._state = SequenceState(last_result=self._options.initial_arg)

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def steps(self) -> tuple[Callable[..., Any], ...]:
        return self._steps

    @property
    def progress(self) -> int:
        """Index of the step that runs next."""
        return self._state.progress

    @property
    def last_result(self) -> Any:
        """Input of the step at progress, or the final output once complete."""
        return self._state.last_result

    @property
    def status(self) -> SequenceStatus:
        return self._state.status

    @property
    def is_complete(self) -> bool:
        return self._state.status.is_complete

    # =========================================================================
    # Execution
    # =========================================================================

    async def __call__(self) -> Any:
        """
        Run every step from the current progress onward.

        Returns:
            The last step's output

        Raises:
            SequenceBusyError: If another invocation is in flight
            Exception: Whatever the failing step raised (after on_error ran)
        """
        state = self._state
        if state.in_flight:
            raise SequenceBusyError(
                f"Sequence {state.sequence_id} is already running step {state.progress}"
            )

        if state.status.is_complete:
            return state.last_result

        state.in_flight = True
        state.status = SequenceStatus.RUNNING
        try:
            return await self._run_remaining(state)
        finally:
            state.in_flight = False
            # Interrupted by cancellation; resume at the same step next time
            if state.status.is_running:
                state.status = SequenceStatus.FAILED

    async def _run_remaining(self, state: SequenceState) -> Any:
        value = state.last_result
        total = len(self._steps)

        for index in range(state.progress, total):
            state.last_result = value
            state.progress = index

            logger.debug(f"[{state.sequence_id}] running step {index + 1}/{total}")
            outcome = await capture(invoke(self._steps[index], self._context, value))

            if isinstance(outcome, Rejected):
                state.status = SequenceStatus.FAILED
                logger.debug(
                    f"[{state.sequence_id}] step {index + 1}/{total} failed: {outcome.error!r}"
                )
                await self._report(outcome.error)
                raise outcome.error

            value = outcome.value

        state.last_result = value
        state.progress = total
        state.status = SequenceStatus.COMPLETE
        logger.info(f"[{state.sequence_id}] completed {total} steps")
        return value

    async def _report(self, error: BaseException) -> None:
        """Hand a step failure to on_error; never suppresses it."""
        on_error = self._options.on_error
        if on_error is None:
            return
        try:
            await invoke(on_error, self._context, error)
        except Exception as hook_error:
            raise hook_error from error

    def reset(self) -> None:
        """
        Rewind to the first step with the initial argument.

        Raises:
            SequenceBusyError: If an invocation is in flight
        """
        if self._state.in_flight:
            raise SequenceBusyError(f"Cannot reset running sequence {self._state.sequence_id}")
        self._state = SequenceState(last_result=self._options.initial_arg)

    def __repr__(self) -> str:
        return (
            f"ResumableSequence(steps={len(self._steps)}, "
            f"progress={self._state.progress}, status={self._state.status})"
        )


def resumable(
    context: Any,
    steps: Sequence[Callable[..., Any]],
    options: SequenceOptions | None = None,
    *,
    on_error: Callable[[Any, BaseException], Any] | None = None,
    initial_arg: Any = None,
) -> ResumableSequence:
    """
    Build a resumable sequence over steps.

    Args:
        context: Calling context for every step and hook
        steps: Functions called as step(context, value)
        options: SequenceOptions; mutually exclusive with the keywords below
        on_error: See SequenceOptions.on_error
        initial_arg: See SequenceOptions.initial_arg

    Returns:
        A ResumableSequence; await it to run

    Raises:
        TypeError: If options and keyword settings are both given
    """
    if options is None:
        options = SequenceOptions(on_error=on_error, initial_arg=initial_arg)
    elif on_error is not None or initial_arg is not None:
        raise TypeError("Pass either options or keyword settings to resumable(), not both")
    return ResumableSequence(context, steps, options)
