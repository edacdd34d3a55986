"""
Job Scheduler

Registry of recurring jobs on top of Celery beat.

    scheduler.register("order-reset", "*/5 * * * *", reset_job)

`register` records the job and adds a beat entry that sends the job
name to the generic `run_scheduled_job` task; the worker then calls
`scheduler.run(name)`. Cron fields are read in the Celery app timezone,
which is set to the reference timezone.

Each job fires under its own non-blocking file lock: a trigger that
arrives while the previous run is still going is skipped, not queued
and not run in parallel.

Version: 1.0.0
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Optional, Union

from celery import Celery
from celery.schedules import BaseSchedule, crontab, schedule
from filelock import FileLock, Timeout

logger = logging.getLogger(__name__)

RUN_JOB_TASK = "hotel_orders.tasks.run_scheduled_job"

ScheduleSpec = Union[str, timedelta, int, float, BaseSchedule]


@dataclass
class ScheduledJob:
    """A registered job: its identity, when it fires and what it runs."""
    name: str
    schedule: BaseSchedule
    func: Callable[[], Any]


def build_schedule(spec: ScheduleSpec, app: Optional[Celery] = None) -> BaseSchedule:
    """
    Turn a schedule spec into a Celery schedule.

    Args:
        spec: 5-field cron string ("30 23 * * *"), interval as
            timedelta or seconds, or a ready Celery schedule
        app: Celery app whose timezone the cron fields are read in

    Raises:
        ValueError: malformed cron string or non-positive interval
    """
    if isinstance(spec, BaseSchedule):
        return spec

    if isinstance(spec, str):
        fields = spec.split()
        if len(fields) != 5:
            raise ValueError(f"Cron expression needs 5 fields, got {len(fields)}: {spec!r}")
        minute, hour, day_of_month, month_of_year, day_of_week = fields
        return crontab(
            minute=minute,
            hour=hour,
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            day_of_week=day_of_week,
            app=app,
        )

    if isinstance(spec, (int, float)) and not isinstance(spec, bool):
        spec = timedelta(seconds=spec)

    if isinstance(spec, timedelta):
        if spec.total_seconds() <= 0:
            raise ValueError(f"Interval must be positive, got {spec}")
        return schedule(run_every=spec, app=app)

    raise ValueError(f"Unsupported schedule spec: {spec!r}")


class JobScheduler:
    """
    Registers jobs with Celery beat and runs them one firing at a time.

    Attributes:
        celery_app: App whose beat schedule receives the entries (optional)
        lock_directory: Where the per-job lock files live
    """

    def __init__(self, celery_app: Optional[Celery] = None, lock_directory: Union[str, Path] = "data/locks"):
        self.celery_app = celery_app
        self.lock_directory = Path(lock_directory)
        self._jobs: dict[str, ScheduledJob] = {}

    @property
    def jobs(self) -> dict[str, ScheduledJob]:
        return dict(self._jobs)

    def register(self, name: str, spec: ScheduleSpec, job: Callable[[], Any]) -> ScheduledJob:
        """
        Register a zero-argument job (sync or async) under a unique name.

        Raises:
            ValueError: name already taken or bad schedule
        """
        if name in self._jobs:
            raise ValueError(f"Job {name!r} is already registered")

        scheduled = ScheduledJob(name=name, schedule=build_schedule(spec, self.celery_app), func=job)
        self._jobs[name] = scheduled

        if self.celery_app is not None:
            beat_schedule = dict(self.celery_app.conf.beat_schedule or {})
            beat_schedule[name] = {
                "task": RUN_JOB_TASK,
                "schedule": scheduled.schedule,
                "args": (name,),
            }
            self.celery_app.conf.beat_schedule = beat_schedule

        logger.info(f"Registered job {name!r}: {scheduled.schedule}")
        return scheduled

    def _lock_for(self, name: str) -> FileLock:
        self.lock_directory.mkdir(parents=True, exist_ok=True)
        return FileLock(str(self.lock_directory / f"{name}.lock"), timeout=0)

    def run(self, name: str) -> dict[str, Any]:
        """
        Fire a job once.

        Failures are logged and reported in the result, never raised.

        Returns:
            {"job", "status": "completed" | "failed" | "skipped", ...}

        Raises:
            KeyError: no job with that name
        """
        job = self._jobs[name]

        try:
            with self._lock_for(name):
                return self._fire(job)
        except Timeout:
            logger.warning(f"Job {name!r} is still running; skipping this trigger")
            return {"job": name, "status": "skipped"}

    def _fire(self, job: ScheduledJob) -> dict[str, Any]:
        logger.info(f"Job {job.name!r} firing")
        start_time = time.time()

        try:
            result = job.func()
            if inspect.iscoroutine(result):
                result = asyncio.run(result)
        except Exception as e:
            elapsed = round(time.time() - start_time, 3)
            logger.exception(f"Job {job.name!r} failed after {elapsed}s: {e}")
            return {"job": job.name, "status": "failed", "error": str(e), "elapsed_seconds": elapsed}

        elapsed = round(time.time() - start_time, 3)
        logger.info(f"Job {job.name!r} completed in {elapsed}s")
        return {"job": job.name, "status": "completed", "result": result, "elapsed_seconds": elapsed}
