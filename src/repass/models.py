"""Core data models for repass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

# A zero-argument callable producing an awaitable (or a plain value).
Task = Callable[[], Any]


class JobStatus(str, Enum):
    """Possible states for a job."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Job:
    """The repeater's record of one task's outcome across passes."""

    id: int
    task: Task
    status: JobStatus = JobStatus.PENDING
    value: Any = None
    error: BaseException | None = None
    attempts: int = 0


@dataclass(frozen=True)
class JobResult:
    """Final outcome of one job, reported in task order."""

    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """True when the job produced a value rather than an accepted error."""
        return self.error is None

    @classmethod
    def from_job(cls, job: Job) -> JobResult:
        if job.status is JobStatus.COMPLETED and job.error is None:
            return cls(value=job.value)
        return cls(error=job.error)


@dataclass(frozen=True)
class RepeaterConfig:
    """Options for a TaskRepeater.

    channels: maximum concurrent task invocations per pass.
    interval_strategy: maps a finished pass number to the delay (seconds)
        before the next pass. None means no delay.
    should_complete_on_error: returns True for errors that end a job as a
        terminal error outcome instead of being retried. None retries all.
    max_runs: pass budget. None means retry until everything succeeds.
    """

    channels: int = 1
    interval_strategy: Callable[[int], float] | None = None
    should_complete_on_error: Callable[[BaseException], bool] | None = None
    max_runs: int | None = None

    def __post_init__(self) -> None:
        if self.channels < 1:
            raise ValueError(f"channels must be >= 1, got {self.channels}")
        if self.max_runs is not None and self.max_runs < 1:
            raise ValueError(f"max_runs must be >= 1 or None, got {self.max_runs}")
