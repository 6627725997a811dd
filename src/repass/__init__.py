"""repass - Bounded-concurrency async queue and multi-pass task retries."""

from repass import intervals
from repass.errors import MaxRunsExceeded, RepassError
from repass.models import Job, JobResult, JobStatus, RepeaterConfig, Task
from repass.queue import AsyncQueue
from repass.repeater import TaskRepeater

__version__ = "0.1.0"
__all__ = [
    "AsyncQueue",
    "TaskRepeater",
    "RepeaterConfig",
    "Job",
    "JobResult",
    "JobStatus",
    "Task",
    "MaxRunsExceeded",
    "RepassError",
    "intervals",
]
