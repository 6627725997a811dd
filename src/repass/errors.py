"""Exceptions raised through repass completion notifications."""

from __future__ import annotations


class RepassError(Exception):
    """Base class for repass errors."""


class MaxRunsExceeded(RepassError):
    """The pass budget ran out while some jobs were still failing."""

    REASON = "Max attempts exceeded"

    def __init__(self, max_runs: int, failed: list[int]) -> None:
        super().__init__(self.REASON)
        self.max_runs = max_runs
        self.failed = failed
