"""Configuration for resumable sequences."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SequenceOptions:
    """
    Optional settings for resumable().

    Example:
        options = SequenceOptions(
            on_error=lambda ctx, err: log.warning("step failed: %s", err),
            initial_arg={"page": 1},
        )
    """

    on_error: Callable[[Any, BaseException], Any] | None = None
    """Observes every step failure; cannot suppress it."""

    initial_arg: Any = None
    """Value fed to the first step."""
