from datetime import timedelta

import pytest
from celery.schedules import crontab, schedule
from filelock import FileLock

from hotel_orders.scheduler import JobScheduler, build_schedule


# =============================================================================
# SCHEDULE SPECS
# =============================================================================

def test_cron_string():
    parsed = build_schedule("30 23 * * *")

    assert isinstance(parsed, crontab)
    assert parsed.hour == {23}
    assert parsed.minute == {30}


def test_interval_in_seconds():
    parsed = build_schedule(300)

    assert isinstance(parsed, schedule)
    assert parsed.run_every == timedelta(minutes=5)


def test_interval_as_timedelta():
    assert build_schedule(timedelta(minutes=5)).run_every == timedelta(minutes=5)


def test_celery_schedule_passes_through():
    ready = crontab(minute="*/5")

    assert build_schedule(ready) is ready


@pytest.mark.parametrize("spec", ["* * *", "", 0, -10, timedelta(0), object()])
def test_bad_specs_are_rejected(spec):
    with pytest.raises(ValueError):
        build_schedule(spec)


# =============================================================================
# REGISTRATION AND FIRING
# =============================================================================

def test_duplicate_names_are_rejected(tmp_path):
    scheduler = JobScheduler(lock_directory=tmp_path)
    scheduler.register("nightly", "0 23 * * *", lambda: None)

    with pytest.raises(ValueError):
        scheduler.register("nightly", "0 22 * * *", lambda: None)


def test_run_sync_job(tmp_path):
    scheduler = JobScheduler(lock_directory=tmp_path)
    scheduler.register("answer", 60, lambda: 42)

    outcome = scheduler.run("answer")

    assert outcome["status"] == "completed"
    assert outcome["result"] == 42


def test_run_async_job(tmp_path):
    async def job():
        return "done"

    scheduler = JobScheduler(lock_directory=tmp_path)
    scheduler.register("async-job", 60, job)

    assert scheduler.run("async-job")["result"] == "done"


def test_failing_job_is_contained(tmp_path):
    def job():
        raise RuntimeError("boom")

    scheduler = JobScheduler(lock_directory=tmp_path)
    scheduler.register("broken", 60, job)

    outcome = scheduler.run("broken")

    assert outcome["status"] == "failed"
    assert "boom" in outcome["error"]


def test_unknown_job(tmp_path):
    with pytest.raises(KeyError):
        JobScheduler(lock_directory=tmp_path).run("missing")


def test_overlapping_trigger_is_skipped(tmp_path):
    calls = []
    scheduler = JobScheduler(lock_directory=tmp_path)
    scheduler.register("order-reset", "*/5 * * * *", lambda: calls.append("ran"))

    with FileLock(str(tmp_path / "order-reset.lock")):
        outcome = scheduler.run("order-reset")

    assert outcome == {"job": "order-reset", "status": "skipped"}
    assert calls == []

    assert scheduler.run("order-reset")["status"] == "completed"
    assert calls == ["ran"]


def test_jobs_are_locked_independently(tmp_path):
    scheduler = JobScheduler(lock_directory=tmp_path)
    scheduler.register("first", 60, lambda: "first")
    scheduler.register("second", 60, lambda: "second")

    with FileLock(str(tmp_path / "first.lock")):
        assert scheduler.run("second")["status"] == "completed"
