import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from vodcollect.database import ScheduleRepository
from vodcollect.errors import PageCountError
from vodcollect.models.base import as_utc
from vodcollect.scheduler import SchedulerService
from vodcollect.tasks import TaskProgress

from conftest import RecordingSleep, add_source


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


class FakeCollector:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def run(self, source, hours, task_id):
        self.calls.append((source.name, hours, task_id))
        if source.name in self.failing:
            raise PageCountError("page count failed")
        return TaskProgress(status="completed", success=len(source.name), failed=0)


async def _park_on_tick(seconds):
    # Loop ticks wait until cancelled; source spacing returns at once
    if seconds >= 60:
        await asyncio.Event().wait()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tick_sleep():
    return RecordingSleep(on_sleep=_park_on_tick)


@pytest.fixture
async def scheduler(database, clock, tick_sleep):
    service = SchedulerService(
        database,
        FakeCollector(failing={"broken"}),
        tick_seconds=60,
        source_spacing=5,
        default_interval_hours=12,
        change_window_hours=24,
        sleep=tick_sleep,
        clock=clock,
    )
    yield service
    await service.shutdown()


async def _config(database):
    async with database.session() as session:
        return await ScheduleRepository(session).get_config()


async def test_initialize_creates_disabled_default(scheduler, database, clock):
    config = await scheduler.initialize()

    assert not config.enabled
    assert config.interval_hours == 12
    stored = await _config(database)
    assert as_utc(stored.next_run) == clock.now + timedelta(hours=12)
    assert scheduler._loop_task is None


async def test_initialize_resumes_enabled_schedule(scheduler, database, clock):
    async with database.session() as session:
        await ScheduleRepository(session).save_config(True, 6, clock.now + timedelta(hours=6))

    await scheduler.initialize()

    assert scheduler._loop_task is not None
    assert (await scheduler.status())["is_running"]


async def test_begin_enables_and_schedules_next_run(scheduler, database, clock):
    task_id = await scheduler.begin()

    config = await _config(database)
    assert config.enabled
    assert as_utc(config.next_run) == clock.now + timedelta(hours=12)

    status = await scheduler.status()
    assert status["is_running"]
    assert status["current_task_id"] == task_id


async def test_cycle_runs_enabled_sources_in_sequence(scheduler, database, tick_sleep):
    await add_source(database, name="alpha")
    await add_source(database, name="broken")
    await add_source(database, name="off", enabled=False)

    ran = await scheduler.run_cycle()

    assert ran == 2
    assert [(name, hours) for name, hours, _ in scheduler.collector.calls] == [("alpha", 24), ("broken", 24)]
    assert tick_sleep.calls == [5]

    logs = {log["collection_name"]: log for log in await scheduler.recent_logs()}
    assert logs["alpha"]["status"] == "completed"
    assert logs["alpha"]["videos_collected"] == 5
    assert logs["alpha"]["completed_at"] is not None
    assert logs["broken"]["status"] == "failed"
    assert "page count failed" in logs["broken"]["errors"]

    status = await scheduler.status()
    assert status["current_task_id"] is None


async def test_log_task_id_matches_collector_task(scheduler, database):
    await add_source(database, name="alpha")
    await scheduler.run_cycle()

    (_, _, task_id), = scheduler.collector.calls
    assert (await scheduler.recent_logs())[0]["task_id"] == task_id


async def test_tick_before_due_does_nothing(scheduler, database, clock):
    await add_source(database, name="alpha")
    await scheduler.begin()

    assert await scheduler.tick()
    assert scheduler.collector.calls == []


async def test_tick_when_due_runs_cycle_and_reschedules(scheduler, database, clock):
    await add_source(database, name="alpha")
    await scheduler.begin()
    clock.now += timedelta(hours=13)

    assert await scheduler.tick()

    assert len(scheduler.collector.calls) == 1
    config = await _config(database)
    assert as_utc(config.last_run) == clock.now
    assert as_utc(config.next_run) == clock.now + timedelta(hours=12)


async def test_tick_when_disabled_ends_loop(scheduler, database):
    await scheduler.begin()
    await scheduler.stop()

    assert not await scheduler.tick()
    assert not (await scheduler.status())["is_running"]


async def test_stop_clears_next_run(scheduler, database):
    await scheduler.begin()
    await scheduler.stop()

    config = await _config(database)
    assert not config.enabled
    assert config.next_run is None


async def test_update_config_keeps_interval_when_omitted(scheduler, database, clock):
    await scheduler.update_config(True, 6)
    result = await scheduler.update_config(True)

    assert result["interval_hours"] == 6
    config = await _config(database)
    assert as_utc(config.next_run) == clock.now + timedelta(hours=6)

    await scheduler.update_config(False)
    assert (await _config(database)).next_run is None


async def test_start_runs_immediately(scheduler, database):
    await add_source(database, name="alpha")

    await scheduler.start()

    assert len(scheduler.collector.calls) == 1
    status = await scheduler.status()
    assert status["enabled"]
    assert status["is_running"]
    assert status["current_task_id"] is None
    assert len(status["recent_logs"]) == 1


async def test_recent_logs_limit(scheduler, database):
    for i in range(3):
        await add_source(database, name=f"s{i}")
    await scheduler.run_cycle()

    assert len(await scheduler.recent_logs(2)) == 2
