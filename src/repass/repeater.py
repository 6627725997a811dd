"""Multi-pass retry orchestrator built on AsyncQueue."""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from typing import Callable, Sequence

from repass.errors import MaxRunsExceeded
from repass.models import Job, JobResult, JobStatus, RepeaterConfig, Task
from repass.queue import AsyncQueue

logger = logging.getLogger(__name__)


class TaskRepeater:
    """
    Runs a fixed batch of tasks, retrying the failed ones pass after pass.

    Each pass pushes the jobs still failing through one AsyncQueue and
    waits for it to drain. Results come back in the order the tasks were
    given, no matter when each of them finished or how often it was retried.

    Example:
        repeater = TaskRepeater(
            [lambda: fetch("a"), lambda: fetch("b")],
            channels=2,
            interval_strategy=intervals.linear(0.5),
            should_complete_on_error=lambda e: getattr(e, "status", None) == 404,
            max_runs=5,
        )
        repeater.start()
        results = await repeater.on_complete()
        values = [r.value for r in results if r.ok]
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        *,
        channels: int | None = None,
        interval_strategy: Callable[[int], float] | None = None,
        should_complete_on_error: Callable[[BaseException], bool] | None = None,
        max_runs: int | None = None,
        config: RepeaterConfig | None = None,
    ) -> None:
        if config is None:
            config = RepeaterConfig(
                channels=1 if channels is None else channels,
                interval_strategy=interval_strategy,
                should_complete_on_error=should_complete_on_error,
                max_runs=max_runs,
            )
        elif (
            channels is not None
            or interval_strategy is not None
            or should_complete_on_error is not None
            or max_runs is not None
        ):
            raise ValueError("Pass either config or keyword options, not both.")

        self._config = config
        self._jobs: list[Job] = [Job(id=i, task=task) for i, task in enumerate(tasks)]
        self._queue = AsyncQueue(channels=config.channels)

        # Callbacks
        self._on_pass_callback: Callable | None = None

        # Completion subscribers and final outcome
        self._complete: list[asyncio.Future] = []
        self._results: list[JobResult] | None = None
        self._error: BaseException | None = None
        self._done = False

        # Orchestrator state
        self._run_number = 0
        self._started = False
        self._runner_task: asyncio.Task | None = None

    # --- Introspection ---

    @property
    def config(self) -> RepeaterConfig:
        return self._config

    @property
    def jobs(self) -> list[Job]:
        """Jobs in task order. Their state reflects the latest pass."""
        return list(self._jobs)

    @property
    def run_number(self) -> int:
        """Number of passes started so far."""
        return self._run_number

    @property
    def started(self) -> bool:
        return self._started

    @property
    def done(self) -> bool:
        return self._done

    # --- Event Callbacks ---

    def on_pass(self, func):
        """
        Decorator to register a progress callback.

        Called after every pass with (run_number, failed_jobs), where
        failed_jobs are the jobs that will be retried (empty on the last
        pass).

        Example:
            @repeater.on_pass
            def report(run_number, failed):
                logging.info(f"pass {run_number}: {len(failed)} to retry")
        """
        self._on_pass_callback = func
        return func

    # --- Lifecycle ---

    def start(self) -> None:
        """
        Start the first pass over all jobs.

        Non-blocking and idempotent: only the first call has any effect.
        Outcomes surface through on_complete().

        Must be called with an asyncio event loop running; otherwise
        RuntimeError is raised and the repeater stays unstarted.
        """
        if self._started:
            return

        loop = asyncio.get_running_loop()
        self._started = True
        self._runner_task = loop.create_task(self._run())

    def on_complete(self) -> asyncio.Future:
        """
        Get a future settled once every job is done.

        Resolves with a list of JobResult in task order, or fails with
        MaxRunsExceeded when the pass budget runs out. Subscribing after
        the repeater finished returns an already settled future.
        """
        future = asyncio.get_running_loop().create_future()
        if self._done:
            self._settle(future)
        else:
            self._complete.append(future)
        return future

    async def run(self) -> list[JobResult]:
        """Start the repeater and wait for its results."""
        completion = self.on_complete()
        self.start()
        return await completion

    # --- Passes ---

    async def _run(self) -> None:
        """Background loop running passes until nothing is left to retry."""
        try:
            pending = list(self._jobs)
            while pending:
                self._run_number += 1
                run_number = self._run_number
                logger.debug("Pass %d: running %d job(s)", run_number, len(pending))

                drained = self._queue.on_drain()
                for job in pending:
                    self._queue.enqueue(functools.partial(self._execute_job, job))
                await drained

                pending = [job for job in self._jobs if job.status is JobStatus.FAILED]
                self._emit_pass(run_number, pending)
                if not pending:
                    break

                max_runs = self._config.max_runs
                if max_runs is not None and run_number >= max_runs:
                    failed = [job.id for job in pending]
                    logger.warning(
                        "Giving up after %d pass(es), %d job(s) still failing: %s",
                        run_number, len(failed), failed,
                    )
                    self._finish(error=MaxRunsExceeded(max_runs, failed))
                    return

                # Zero still yields to the loop before the next pass
                await asyncio.sleep(self._get_interval(run_number))

            logger.info(
                "Completed %d job(s) in %d pass(es)", len(self._jobs), self._run_number
            )
            self._finish(results=[JobResult.from_job(job) for job in self._jobs])
        except Exception as e:
            logger.exception("Repeater stopped on an unexpected error")
            self._finish(error=e)

    async def _execute_job(self, job: Job) -> None:
        """Invoke one job's task and record the outcome on the job."""
        job.attempts += 1
        try:
            result = job.task()
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError as e:
            # Cancelled from inside the task: retry it, the queue frees the slot
            job.value = None
            job.error = e
            job.status = JobStatus.FAILED
            logger.debug("Job %d cancelled (attempt %d)", job.id, job.attempts)
            raise
        except Exception as e:
            job.value = None
            job.error = e
            if self._check_should_complete(e):
                job.status = JobStatus.COMPLETED
                logger.debug("Job %d failed with accepted error: %r", job.id, e)
            else:
                job.status = JobStatus.FAILED
                logger.debug("Job %d failed (attempt %d): %r", job.id, job.attempts, e)
            return

        job.status = JobStatus.COMPLETED
        job.value = result
        job.error = None

    def _check_should_complete(self, error: BaseException) -> bool:
        """Check if an error ends the job. Returns False if no callback registered."""
        handler = self._config.should_complete_on_error
        if handler is None:
            return False
        try:
            return bool(handler(error))
        except Exception:
            # Exception in classifier = treat as retryable
            logger.warning("should_complete_on_error raised; retrying", exc_info=True)
            return False

    def _get_interval(self, run_number: int) -> float:
        """Get the delay before the next pass. Returns 0 if no strategy set."""
        strategy = self._config.interval_strategy
        if strategy is None:
            return 0.0
        try:
            delay = float(strategy(run_number) or 0)
        except Exception:
            logger.warning("interval_strategy raised; not delaying", exc_info=True)
            return 0.0
        if delay < 0:
            logger.warning("interval_strategy returned %r; not delaying", delay)
            return 0.0
        return delay

    def _emit_pass(self, run_number: int, failed: list[Job]) -> None:
        if self._on_pass_callback is None:
            return
        try:
            self._on_pass_callback(run_number, list(failed))
        except Exception:
            logger.warning("on_pass callback raised", exc_info=True)

    # --- Completion ---

    def _finish(
        self,
        results: list[JobResult] | None = None,
        error: BaseException | None = None,
    ) -> None:
        if self._done:
            return
        self._done = True
        self._results = results
        self._error = error

        subscribers, self._complete = self._complete, []
        for future in subscribers:
            self._settle(future)

    def _settle(self, future: asyncio.Future) -> None:
        if future.done():
            return
        if self._error is not None:
            future.set_exception(self._error)
        else:
            future.set_result(list(self._results or []))
