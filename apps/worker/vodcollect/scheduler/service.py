"""
Recurring collection over all enabled sources

The persisted ScheduledTaskConfig is authoritative and is re-read on every
tick; the in-memory mirror only feeds status queries.
"""
import asyncio
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..collector.batch import BatchCollector
from ..collector.schemas import SourceConfig
from ..config import settings
from ..database import ScheduleRepository, SourcesRepository
from ..logging_config import setup_logging
from ..models import TaskExecutionLog
from ..models.base import as_utc, utcnow
from ..tasks.progress import FAILED
from ..tasks.service import new_task_id

logger = setup_logging(__name__)

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], datetime]


def _iso(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value else None


def log_to_dict(log: TaskExecutionLog) -> Dict[str, Any]:
    return {
        "task_id": log.task_id,
        "collection_id": log.collection_id,
        "collection_name": log.collection_name,
        "status": log.status,
        "started_at": _iso(log.started_at),
        "completed_at": _iso(log.completed_at),
        "videos_collected": log.videos_collected,
        "message": log.message,
        "errors": log.errors,
    }


class SchedulerService:
    """Runs collection cycles on a fixed interval"""

    def __init__(
        self,
        database,
        collector: BatchCollector,
        tick_seconds: Optional[float] = None,
        source_spacing: Optional[float] = None,
        default_interval_hours: Optional[int] = None,
        change_window_hours: Optional[int] = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = utcnow
    ):
        config = settings.get_scheduler_config()
        self.database = database
        self.collector = collector
        self.tick_seconds = config["tick_seconds"] if tick_seconds is None else tick_seconds
        self.source_spacing = config["source_spacing"] if source_spacing is None else source_spacing
        self.default_interval_hours = default_interval_hours or config["default_interval_hours"]
        self.change_window_hours = change_window_hours or config["change_window_hours"]
        self.sleep = sleep
        self.clock = clock

        self._lock = asyncio.Lock()
        self._enabled = False
        self._current_task_id: Optional[str] = None
        self._current_collection: Optional[str] = None
        self._loop_task: Optional[asyncio.Task] = None
        self._cycle_task: Optional[asyncio.Task] = None

    # Persisted config

    async def _load_config(self):
        async with self.database.session() as session:
            return await ScheduleRepository(session).ensure_config(self.default_interval_hours, self.clock())

    async def _save_config(self, enabled: bool, interval_hours: int, next_run, last_run=None):
        async with self.database.session() as session:
            return await ScheduleRepository(session).save_config(enabled, interval_hours, next_run, last_run)

    async def initialize(self):
        """Create the default config if missing and resume an enabled schedule"""
        config = await self._load_config()
        if config.enabled:
            async with self._lock:
                self._enabled = True
            self._spawn_loop()
            logger.info(f"Resumed scheduled collection every {config.interval_hours}h")
        return config

    # Lifecycle

    def _spawn_loop(self):
        if self._loop_task is None or self._loop_task.done():
            self._loop_task = asyncio.create_task(self.loop())

    async def begin(self) -> str:
        """Enable the schedule and start the loop; returns a placeholder task id"""
        task_id = new_task_id()
        config = await self._load_config()
        await self._save_config(True, config.interval_hours, self.clock() + timedelta(hours=config.interval_hours))

        async with self._lock:
            self._enabled = True
            self._current_task_id = task_id
            self._current_collection = None

        self._spawn_loop()
        logger.info(f"Scheduled collection enabled, interval {config.interval_hours}h", extra={"task_id": task_id})
        return task_id

    async def run_immediate_cycle(self) -> int:
        try:
            return await self.run_cycle()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Immediate collection cycle failed: {e}", exc_info=True)
            return 0

    async def start(self) -> str:
        """Enable the schedule and run one cycle right away"""
        task_id = await self.begin()
        await self.run_immediate_cycle()
        return task_id

    async def start_in_background(self) -> str:
        """Like start(), but the first cycle runs as a background task"""
        task_id = await self.begin()
        if self._cycle_task is None or self._cycle_task.done():
            self._cycle_task = asyncio.create_task(self.run_immediate_cycle())
        return task_id

    async def stop(self):
        config = await self._load_config()
        await self._save_config(False, config.interval_hours, None)
        async with self._lock:
            self._enabled = False
        logger.info("Scheduled collection disabled")

    async def update_config(self, enabled: bool, interval_hours: Optional[int] = None) -> Dict[str, Any]:
        config = await self._load_config()
        interval = interval_hours if interval_hours else config.interval_hours
        next_run = self.clock() + timedelta(hours=interval) if enabled else None
        config = await self._save_config(enabled, interval, next_run)

        async with self._lock:
            self._enabled = enabled
        if enabled:
            self._spawn_loop()

        logger.info(f"Scheduler config updated: enabled={enabled}, interval={interval}h")
        return {
            "enabled": config.enabled,
            "interval_hours": config.interval_hours,
            "next_run": _iso(config.next_run),
        }

    async def shutdown(self):
        for task in (self._cycle_task, self._loop_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._cycle_task = None
        self._loop_task = None

    # Loop

    async def loop(self):
        logger.info("Scheduler loop started")
        while True:
            await self.sleep(self.tick_seconds)
            try:
                if not await self.tick():
                    break
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Scheduler tick failed: {e}", exc_info=True)
        logger.info("Scheduler loop exited")

    async def tick(self) -> bool:
        """
        One scheduler check

        Returns False when the persisted config is disabled and the loop
        should exit.
        """
        config = await self._load_config()
        if not config.enabled:
            async with self._lock:
                self._enabled = False
            return False

        next_run = as_utc(config.next_run)
        if next_run is not None and self.clock() < next_run:
            return True

        logger.info("Scheduled collection cycle due")
        await self.run_cycle()

        finished = self.clock()
        config = await self._load_config()
        next_run = finished + timedelta(hours=config.interval_hours) if config.enabled else None
        await self._save_config(config.enabled, config.interval_hours, next_run, last_run=finished)
        return True

    # Cycle

    async def run_cycle(self) -> int:
        """Collect every enabled source in sequence; returns how many ran"""
        async with self.database.session() as session:
            sources = [SourceConfig.from_model(s) for s in await SourcesRepository(session).list_enabled()]

        try:
            for index, source in enumerate(sources):
                if index > 0:
                    await self.sleep(self.source_spacing)
                await self._run_source(source)
        finally:
            async with self._lock:
                self._current_task_id = None
                self._current_collection = None

        return len(sources)

    async def _run_source(self, source: SourceConfig):
        task_id = new_task_id()
        async with self._lock:
            self._current_task_id = task_id
            self._current_collection = source.name

        async with self.database.session() as session:
            log = await ScheduleRepository(session).add_log(TaskExecutionLog(
                task_id=task_id,
                collection_id=source.id,
                collection_name=source.name,
                status="running",
                started_at=self.clock(),
                message=f"Collecting {source.name}",
            ))
            log_id = log.id

        try:
            progress = await self.collector.run(source, self.change_window_hours, task_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                f"Scheduled collection of {source.name} failed: {e}",
                extra={"task_id": task_id, "source_name": source.name},
            )
            async with self.database.session() as session:
                await ScheduleRepository(session).finish_log(
                    log_id, FAILED, f"Collection failed: {e}", errors=str(e)
                )
            return

        status = progress.status
        async with self.database.session() as session:
            await ScheduleRepository(session).finish_log(
                log_id,
                status,
                f"Collection {status}, {progress.success} videos collected",
                videos_collected=progress.success,
            )
        logger.info(
            f"Scheduled collection of {source.name} {status}: {progress.success} videos",
            extra={"task_id": task_id, "source_name": source.name},
        )

    # Queries

    async def recent_logs(self, limit: int = 50) -> List[Dict[str, Any]]:
        async with self.database.session() as session:
            logs = await ScheduleRepository(session).recent_logs(limit)
        return [log_to_dict(log) for log in logs]

    async def status(self) -> Dict[str, Any]:
        config = await self._load_config()
        async with self._lock:
            mirror_enabled = self._enabled
            current_task_id = self._current_task_id
            current_collection = self._current_collection

        return {
            "enabled": config.enabled,
            "interval_hours": config.interval_hours,
            "last_run": _iso(config.last_run),
            "next_run": _iso(config.next_run),
            "is_running": config.enabled and (mirror_enabled or current_task_id is not None),
            "current_task_id": current_task_id,
            "current_collection": current_collection,
            "recent_logs": await self.recent_logs(10),
        }
